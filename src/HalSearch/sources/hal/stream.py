"""Cursor-paginated HAL result stream.

Walks the Solr deep-paging protocol (`cursorMark`) and yields every matching
document once, in `docid` order, one page at a time.

Paging rules
- The first request uses `cursorMark=*`; every following request echoes the
  `nextCursorMark` of the previous page.
- Sorting is fixed to `docid asc`. Cursor paging needs a unique, stable sort
  key, otherwise documents may be skipped or repeated.
- `numFound` is read from the first page only. If the index changes during a
  long scroll the stream may deliver more or fewer documents than the live
  count.
- A page is requested only when the consumer asks for a document and the
  previous page has been fully consumed.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Mapping

from HalSearch.core.errors import DescriptorFormatError, StreamStateError, UnexpectedResponseError
from HalSearch.core.models import ResultPage, StreamState
from HalSearch.core.query import to_query_string
from HalSearch.sources.hal.client import Transport
from HalSearch.sources.hal.request import DEFAULT_CORE, DEFAULT_HOST, build_url, normalize_options
from HalSearch.utils.log import log

STREAM_SORT = "docid asc"
START_CURSOR = "*"
DEFAULT_ROWS = 1000

_STREAM_PARAMS = frozenset({"sort", "rows", "cursorMark", "start"})


class HalCursorStream:
    """Lazy iterator over all documents matching a query.

    Each instance owns its cursor state and can be iterated once. A stream
    that finished stays exhausted; a stream that failed refuses further pulls
    and must be replaced by a new instance.
    """

    def __init__(
        self,
        client: Transport,
        search: Any = None,
        *,
        options: Mapping[str, Any] | None = None,
        rows: int = DEFAULT_ROWS,
        host: str = DEFAULT_HOST,
        core: str = DEFAULT_CORE,
    ) -> None:
        """Create a stream.

        Args:
            client: Transport used to fetch pages.
            search: Raw query string or search descriptor. ``None`` matches all.
            options: Extra request options such as ``fields`` or ``fq``.
            rows: Page size.
            host: Default API root, overridable through ``options``.
            core: Default core, overridable through ``options``.

        Raises:
            DescriptorFormatError: If the search or options are invalid, or
                options try to set paging parameters.
            ValueError: If ``rows`` is not positive.
        """
        if isinstance(rows, bool) or not isinstance(rows, int) or rows <= 0:
            raise ValueError("rows must be a positive integer")

        request = normalize_options(options, host=host, core=core)
        fixed = _STREAM_PARAMS.intersection(request.params)
        if fixed:
            raise DescriptorFormatError(f"options {sorted(fixed)} are managed by the stream")

        self._client = client
        self._query = to_query_string(search)
        self._request = request
        self._rows = rows

        self._cursor_mark = START_CURSOR
        self._emitted_count = 0
        self._total: int | None = None
        self._pages_fetched = 0
        self._state = StreamState.IDLE
        self._buffer: deque[dict[str, Any]] = deque()

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def emitted_count(self) -> int:
        """Documents handed to the consumer so far; reset to 0 once done."""
        return self._emitted_count

    @property
    def total(self) -> int | None:
        """`numFound` captured from the first page, ``None`` before it."""
        return self._total

    @property
    def cursor_mark(self) -> str:
        return self._cursor_mark

    @property
    def pages_fetched(self) -> int:
        return self._pages_fetched

    @property
    def query(self) -> str:
        return self._query

    def __iter__(self) -> HalCursorStream:
        return self

    def __next__(self) -> dict[str, Any]:
        while not self._buffer:
            if self._state is StreamState.DONE:
                raise StopIteration
            if self._state is StreamState.ERRORED:
                raise StreamStateError("stream failed earlier; create a new stream to start over")
            if self._total is not None and self._emitted_count >= self._total:
                self._finish()
                raise StopIteration
            if not self._fetch_page():
                raise StreamStateError("a page fetch is already in flight for this stream")

        doc = self._buffer.popleft()
        self._emitted_count += 1
        return doc

    def page_url(self) -> str:
        """Return the URL of the next page request."""
        params = dict(self._request.params)
        params["sort"] = STREAM_SORT
        params["rows"] = str(self._rows)
        params["cursorMark"] = self._cursor_mark
        return build_url(self._query, params, host=self._request.host, core=self._request.core)

    def _fetch_page(self) -> bool:
        """Fetch the next page into the buffer.

        Returns:
            ``False`` without doing anything when a fetch is already running,
            ``True`` otherwise.
        """
        if self._state is StreamState.FETCHING:
            return False
        self._state = StreamState.FETCHING

        url = self.page_url()
        try:
            response = self._client.get(url, proxies=self._request.proxies)
            if response.status != 200:
                raise UnexpectedResponseError(
                    f"unexpected status code : {response.status}",
                    status=response.status,
                )
            page = ResultPage.from_body(response.body, require_cursor=True)
        except Exception as e:
            self._state = StreamState.ERRORED
            log.warning(
                "HAL stream failed: page=%d emitted=%d error=%s",
                self._pages_fetched + 1,
                self._emitted_count,
                e,
            )
            raise

        self._pages_fetched += 1
        if self._total is None:
            self._total = page.num_found
        self._buffer.extend(page.docs)
        log.debug(
            "HAL stream page %d: docs=%d emitted=%d total=%d",
            self._pages_fetched,
            len(page.docs),
            self._emitted_count,
            self._total,
        )

        if not page.docs:
            self._finish()
            return True

        self._cursor_mark = page.next_cursor_mark or self._cursor_mark
        self._state = StreamState.IDLE
        return True

    def _finish(self) -> None:
        """Mark the stream as exhausted and reset the emitted counter."""
        log.info("HAL stream completed: pages=%d docs=%d", self._pages_fetched, self._emitted_count)
        self._state = StreamState.DONE
        self._emitted_count = 0

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} q={self._query!r} state={self._state.value}>"
