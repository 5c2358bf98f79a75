"""Data models for the blog search corpus."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


@dataclass(frozen=True)
class PostRecord:
    """One searchable entry of the corpus."""

    title: str
    url: str
    date: str
    categories: tuple[str, ...] = ()
    content: str = ""

    def __post_init__(self) -> None:
        # Categories are always stored as a tuple
        object.__setattr__(self, "categories", tuple(self.categories))


@dataclass
class Post:
    """A published post as resolved by the site generator."""

    title: str | None
    url: str | None
    date: date | datetime | str | None
    categories: list[str] | str = field(default_factory=list)
    body: str = ""
    source_path: str | None = None


class IndexState(Enum):
    """Lifecycle of the in-memory search index."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class SearchResponse:
    """Outcome of a single query."""

    results: list[PostRecord]
    state: IndexState

    @property
    def available(self) -> bool:
        """Whether search could actually run against a loaded corpus."""
        return self.state is IndexState.READY
