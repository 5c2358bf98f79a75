"""In-memory search index loaded from the published corpus artifact."""

import logging
from collections.abc import Iterable

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from blog_search.config import SearchConfig
from blog_search.models import IndexState, PostRecord, SearchResponse

logger = logging.getLogger(__name__)


class CorpusLoadError(Exception):
    """Raised when the corpus artifact cannot be fetched or parsed."""


class CorpusEntry(BaseModel):
    """Wire format of one corpus record."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    title: str = Field(min_length=1)
    url: str = Field(min_length=1)
    date: str
    categories: list[str]
    content: str


_CORPUS_ADAPTER = TypeAdapter(list[CorpusEntry])


def parse_corpus(payload: bytes | str) -> list[PostRecord]:
    """Parse a corpus document.

    Args:
        payload: Raw JSON text of the corpus artifact.

    Returns:
        Corpus records in document order.

    Raises:
        CorpusLoadError: If the payload is not a valid corpus.
    """
    try:
        entries = _CORPUS_ADAPTER.validate_json(payload)
    except ValidationError as exc:
        msg = f"Malformed corpus document: {exc.error_count()} validation error(s)"
        raise CorpusLoadError(msg) from exc
    return [PostRecord(**entry.model_dump()) for entry in entries]


class SearchIndex:
    """Loads the corpus once and answers substring queries from memory.

    The index moves from ``UNLOADED`` to ``LOADING`` when a load starts and
    ends in ``READY`` or ``FAILED``. Both end states are final for the
    lifetime of the object.
    """

    def __init__(
        self,
        corpus_url: str,
        site_url: str = "",
        timeout: float = 10.0,
        max_results: int | None = None,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialise an unloaded index.

        Args:
            corpus_url: URL of the corpus artifact, relative to ``site_url``.
            site_url: Origin the corpus URL is resolved against.
            timeout: Fetch timeout in seconds.
            max_results: Optional cap on results per query.
            transport: Transport for the blocking HTTP client.
            async_transport: Transport for the async HTTP client.
        """
        self.corpus_url = corpus_url
        self.site_url = site_url
        self.timeout = timeout
        self.max_results = max_results
        self.state = IndexState.UNLOADED
        self.error: CorpusLoadError | None = None
        self._transport = transport
        self._async_transport = async_transport
        self._entries: tuple[tuple[PostRecord, str, str], ...] = ()

    @classmethod
    def from_config(
        cls,
        config: SearchConfig,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SearchIndex":
        """Create an unloaded index from configuration."""
        return cls(
            corpus_url=config.corpus_url,
            site_url=config.site_url,
            timeout=config.fetch_timeout,
            max_results=config.max_results,
            transport=transport,
            async_transport=async_transport,
        )

    @classmethod
    def from_records(cls, records: Iterable[PostRecord], max_results: int | None = None) -> "SearchIndex":
        """Create a ready index around an already available corpus."""
        index = cls(corpus_url="", max_results=max_results)
        index._populate(list(records))
        return index

    @property
    def records(self) -> tuple[PostRecord, ...]:
        """Loaded corpus records in corpus order."""
        return tuple(entry[0] for entry in self._entries)

    def load(self) -> IndexState:
        """Fetch and parse the corpus with a blocking request.

        Returns:
            State after the attempt. Only the first call fetches.
        """
        if self.state is not IndexState.UNLOADED:
            return self.state

        self.state = IndexState.LOADING
        logger.info("Loading search corpus from %s%s", self.site_url, self.corpus_url)
        try:
            with httpx.Client(
                base_url=self.site_url,
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = client.get(self.corpus_url)
            records = self._read_response(response)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self._fail(CorpusLoadError(f"Corpus fetch failed: {exc}"))
        except CorpusLoadError as exc:
            self._fail(exc)
        else:
            self._populate(records)
        return self.state

    async def load_async(self) -> IndexState:
        """Fetch and parse the corpus without blocking the event loop.

        Returns:
            State after the attempt. Only the first call fetches.
        """
        if self.state is not IndexState.UNLOADED:
            return self.state

        self.state = IndexState.LOADING
        logger.info("Loading search corpus from %s%s", self.site_url, self.corpus_url)
        try:
            async with httpx.AsyncClient(
                base_url=self.site_url,
                timeout=self.timeout,
                transport=self._async_transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(self.corpus_url)
            records = self._read_response(response)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            self._fail(CorpusLoadError(f"Corpus fetch failed: {exc}"))
        except CorpusLoadError as exc:
            self._fail(exc)
        else:
            self._populate(records)
        return self.state

    def query(self, text: str) -> SearchResponse:
        """Find records whose title or content contains the query.

        Matching is case-insensitive substring containment. An empty query
        matches nothing. Results keep corpus order.

        Args:
            text: Raw query string.

        Returns:
            SearchResponse; ``available`` is False unless the corpus is loaded.
        """
        if self.state is not IndexState.READY:
            return SearchResponse(results=[], state=self.state)

        needle = text.lower()
        if not needle:
            return SearchResponse(results=[], state=self.state)

        results = []
        for record, title, content in self._entries:
            if needle in title or needle in content:
                results.append(record)
                if self.max_results is not None and len(results) >= self.max_results:
                    break
        return SearchResponse(results=results, state=self.state)

    def _read_response(self, response: httpx.Response) -> list[PostRecord]:
        """Check the response status and parse its body.

        Args:
            response: Response to the corpus request.

        Returns:
            Corpus records in document order.

        Raises:
            CorpusLoadError: If the status is not 2xx or the body is not a corpus.
        """
        if not response.is_success:
            msg = f"Corpus fetch returned HTTP {response.status_code}"
            raise CorpusLoadError(msg)
        return parse_corpus(response.content)

    def _populate(self, records: list[PostRecord]) -> None:
        """Hold the corpus in memory and mark the index ready.

        Args:
            records: Corpus records in corpus order.
        """
        self._entries = tuple((r, r.title.lower(), r.content.lower()) for r in records)
        self.state = IndexState.READY
        logger.info("Search corpus ready with %d records", len(self._entries))

    def _fail(self, error: CorpusLoadError) -> None:
        """Record a load failure and mark search unavailable.

        Args:
            error: Cause of the failure.
        """
        self.error = error
        self.state = IndexState.FAILED
        logger.error("Search unavailable: %s", error)
