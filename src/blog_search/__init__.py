"""Client-side search for a static blog: corpus builder and in-memory index."""
