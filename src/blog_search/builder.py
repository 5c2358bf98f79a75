"""Build-time serialization of blog posts into the search corpus."""

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from typing import Any

from blog_search.config import SearchConfig
from blog_search.markup import strip_html
from blog_search.models import Post, PostRecord
from blog_search.posts import PostReader

logger = logging.getLogger(__name__)

MarkupStripper = Callable[[str], str]


class CorpusBuilder:
    """Turns the site's post collection into a single JSON corpus document."""

    def __init__(self, strip_markup: MarkupStripper = strip_html) -> None:
        """Initialise builder with a markup stripping function.

        Args:
            strip_markup: Pure function turning a rendered body into plain text.
        """
        self.strip_markup = strip_markup

    def build(self, posts: Iterable[Post]) -> list[PostRecord]:
        """Assemble corpus records, skipping malformed posts.

        Args:
            posts: Posts in site order.

        Returns:
            Records in the same order, without malformed or duplicate entries.
        """
        records: list[PostRecord] = []
        seen_urls: set[str] = set()

        for position, post in enumerate(posts):
            record = self._to_record(post)
            if record is None:
                logger.warning("Skipping post %s: missing title or url", post.source_path or f"#{position}")
                continue
            if record.url in seen_urls:
                logger.warning("Skipping post %s: duplicate url %s", post.source_path or f"#{position}", record.url)
                continue
            seen_urls.add(record.url)
            records.append(record)
            logger.debug("Added to corpus: %s", record.url)

        return records

    def serialize(self, records: Iterable[PostRecord]) -> str:
        """Serialize records to the corpus JSON document.

        Args:
            records: Corpus records.

        Returns:
            JSON array text; identical records always give identical text.
        """
        return json.dumps([asdict(r) for r in records], ensure_ascii=False, separators=(",", ":"))

    def write(self, posts: Iterable[Post], output_path: Path) -> Path:
        """Build the corpus and write it as the single build artifact.

        Args:
            posts: Posts in site order.
            output_path: Destination file of the corpus artifact.

        Returns:
            Path of the written artifact.
        """
        records = self.build(posts)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(self.serialize(records).encode("utf-8"))
        logger.info("Wrote %d corpus records to %s", len(records), output_path)
        return output_path

    def _to_record(self, post: Post) -> PostRecord | None:
        """Convert a post to a corpus record.

        Args:
            post: Resolved post.

        Returns:
            PostRecord, or None if a required field is missing.
        """
        title = (post.title or "").strip()
        url = (post.url or "").strip()
        if not title or not url:
            return None

        return PostRecord(
            title=title,
            url=url,
            date=format_date(post.date),
            categories=tuple(normalise_categories(post.categories)),
            content=self.strip_markup(post.body or ""),
        )


def format_date(value: date | datetime | str | None) -> str:
    """Format a post date as ``YYYY-MM-DD``.

    Args:
        value: Date, datetime or string starting with an ISO date.

    Returns:
        Formatted date, or an empty string when it cannot be parsed.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10]).isoformat()
        except ValueError:
            logger.debug("Unparseable post date %r", value)
    return ""


def normalise_categories(value: Any) -> list[str]:
    """Coerce categories to a list of strings.

    Args:
        value: List of categories, a space-separated string or a single scalar tag.

    Returns:
        Category names.
    """
    if not value:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def build_site_corpus(config: SearchConfig, strip_markup: MarkupStripper = strip_html) -> Path:
    """Read posts from the configured directory and write the corpus artifact.

    Args:
        config: Search configuration.
        strip_markup: Markup stripping function handed to the builder.

    Returns:
        Path of the written artifact.
    """
    posts = PostReader(base_url=config.base_url).read_directory(config.posts_dir)
    return CorpusBuilder(strip_markup).write(posts, config.artifact_path)
