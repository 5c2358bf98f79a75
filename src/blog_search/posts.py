"""Reader for Jekyll-style post source files."""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

import frontmatter

from blog_search.markup import RENDERERS
from blog_search.models import Post

logger = logging.getLogger(__name__)

POST_FILENAME = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})-(?P<slug>.+)$")


class PostReader:
    """Reads published posts from a directory of front-matter source files."""

    def __init__(self, base_url: str = "") -> None:
        """Initialise post reader.

        Args:
            base_url: Prefix applied to every generated post URL.
        """
        self.base_url = base_url.rstrip("/")

    def read_directory(self, posts_dir: Path) -> list[Post]:
        """Read every published post below a directory.

        A missing directory is a site without posts and yields no posts.

        Args:
            posts_dir: Directory holding the post source files.

        Returns:
            Posts ordered newest first, ties broken by source path.
        """
        if not posts_dir.is_dir():
            logger.warning("Posts directory does not exist, treating site as empty: %s", posts_dir)
            return []

        source_files = sorted(p for p in posts_dir.rglob("*") if p.is_file() and p.suffix in RENDERERS)
        logger.info("Found %d post files in %s", len(source_files), posts_dir)

        posts = []
        for file_path in source_files:
            post = self.read_file(file_path, posts_dir)
            if post is not None:
                posts.append(post)

        # Stable sort keeps the path order for posts sharing a date
        posts.sort(key=lambda p: str(p.date), reverse=True)
        return posts

    def read_file(self, file_path: Path, posts_dir: Path) -> Post | None:
        """Read a single post source file.

        Args:
            file_path: Path to the post file.
            posts_dir: Posts directory the file was found in.

        Returns:
            Post instance, or None if the file is unpublished or unreadable.
        """
        match = POST_FILENAME.match(file_path.stem)
        if match is None:
            logger.warning("Skipping file without a YYYY-MM-DD- prefix: %s", file_path)
            return None

        try:
            return self._load_post(file_path, posts_dir, match)
        except Exception:
            logger.warning("Failed to read post: %s", file_path, exc_info=True)
            return None

    def _load_post(self, file_path: Path, posts_dir: Path, match: re.Match[str]) -> Post | None:
        """Parse front matter and render the body of a post file.

        Args:
            file_path: Path to the post file.
            posts_dir: Posts directory the file was found in.
            match: Filename match holding the date and slug.

        Returns:
            Post instance, or None if the post is unpublished.
        """
        filename_date = date(int(match["year"]), int(match["month"]), int(match["day"]))
        source = frontmatter.loads(file_path.read_text(encoding="utf-8"))

        metadata = source.metadata
        if metadata.get("published", True) is False:
            logger.debug("Skipping unpublished post: %s", file_path)
            return None

        post_date = self._resolve_date(metadata.get("date"), filename_date)
        categories = self._resolve_categories(metadata)
        title = metadata.get("title")
        permalink = metadata.get("permalink")
        if permalink:
            url = f"{self.base_url}/{str(permalink).lstrip('/')}"
        else:
            url = self._compute_url(categories, post_date, match["slug"])

        return Post(
            title=str(title) if title is not None else None,
            url=url,
            date=post_date,
            categories=categories,
            body=RENDERERS[file_path.suffix](source.content),
            source_path=str(file_path.relative_to(posts_dir)),
        )

    def _resolve_date(self, value: Any, fallback: date) -> date:
        """Pick the post date from front matter, falling back to the filename.

        Args:
            value: Raw front matter ``date`` value.
            fallback: Date parsed from the filename.

        Returns:
            Publication date.
        """
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip()[:10])
            except ValueError:
                logger.debug("Unparseable front matter date %r, using filename date", value)
        return fallback

    def _resolve_categories(self, metadata: dict[str, Any]) -> list[str]:
        """Collect categories from ``categories`` or ``category``.

        Args:
            metadata: Front matter mapping.

        Returns:
            Category names in declaration order.
        """
        raw = metadata.get("categories", metadata.get("category"))
        if raw is None:
            return []
        if isinstance(raw, str):
            return raw.split()
        if isinstance(raw, (list, tuple)):
            return [str(item) for item in raw]
        return [str(raw)]

    def _compute_url(self, categories: list[str], post_date: date, slug: str) -> str:
        """Compute the default date-style permalink.

        Args:
            categories: Post categories.
            post_date: Publication date.
            slug: Filename slug.

        Returns:
            URL of the form ``/:categories/:year/:month/:day/:slug.html``.
        """
        parts = [c.lower().replace(" ", "-") for c in categories]
        parts += [f"{post_date.year:04d}", f"{post_date.month:02d}", f"{post_date.day:02d}", f"{slug}.html"]
        return f"{self.base_url}/" + "/".join(parts)
