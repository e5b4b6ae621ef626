"""Search service layer for single-shot HAL queries and streams."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from HalSearch.core.errors import UnexpectedResponseError
from HalSearch.core.models import ResultPage
from HalSearch.core.query import to_query_string
from HalSearch.sources.hal.client import Transport
from HalSearch.sources.hal.request import DEFAULT_CORE, DEFAULT_HOST, build_url, normalize_options
from HalSearch.sources.hal.stream import DEFAULT_ROWS, HalCursorStream
from HalSearch.utils.log import log


@dataclass(slots=True)
class HalSearchService:
    """Application service wrapping the HAL API.

    `query`, `find` and `find_one` either return a result or raise a
    `HalSearchError`; they never return an empty value in place of an error.
    """

    client: Transport
    host: str = DEFAULT_HOST
    core: str = DEFAULT_CORE
    rows: int = DEFAULT_ROWS
    proxy: str | None = None

    def query(self, search: Any, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Run a query and return the raw response body.

        Args:
            search: Raw query string or search descriptor.
            options: Request options (``rows``, ``sort``, ``fields``, ``proxy``...).

        Returns:
            Decoded response body.

        Raises:
            DescriptorFormatError: If the search or options are invalid.
            TransportError: If the request fails.
            UnexpectedResponseError: If the status is not 200 or the body is
                not an object.
        """
        q = to_query_string(search)
        request = normalize_options(self._with_proxy(options), host=self.host, core=self.core)
        url = build_url(q, request.params, host=request.host, core=request.core)

        log.debug("HAL query: q=%s params=%s", q, request.params)
        response = self.client.get(url, proxies=request.proxies)
        if response.status != 200:
            raise UnexpectedResponseError(f"unexpected status code : {response.status}", status=response.status)
        if not isinstance(response.body, dict):
            raise UnexpectedResponseError("unexpected result, body is not an object", status=response.status)
        return response.body

    def find(self, search: Any, options: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Run a query and return its documents.

        Raises:
            UnexpectedResponseError: If the body has no ``response.docs`` list.
        """
        body = self.query(search, options)
        page = ResultPage.from_body(body)
        log.debug("HAL find: docs=%d numFound=%d", len(page.docs), page.num_found)
        return page.docs

    def find_one(self, search: Any, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Run a query limited to one row and return the single document.

        Raises:
            UnexpectedResponseError: If the query does not return exactly one
                document.
        """
        merged = dict(options or {})
        merged["rows"] = 1
        docs = self.find(search, merged)
        if len(docs) != 1:
            raise UnexpectedResponseError(f"unexpected result, expected exactly one document, got {len(docs)}")
        return docs[0]

    def stream(
        self,
        search: Any = None,
        options: Mapping[str, Any] | None = None,
        *,
        rows: int | None = None,
    ) -> HalCursorStream:
        """Create a cursor stream over every document matching ``search``.

        The stream does not issue any request until it is iterated.
        """
        return HalCursorStream(
            self.client,
            search,
            options=self._with_proxy(options),
            rows=rows or self.rows,
            host=self.host,
            core=self.core,
        )

    def _with_proxy(self, options: Mapping[str, Any] | None) -> dict[str, Any]:
        """Add the configured proxy unless the caller passed one."""
        merged = dict(options or {})
        if self.proxy and "proxy" not in merged:
            merged["proxy"] = self.proxy
        return merged
