"""Command implementations for HalSearch CLI.

Turns parsed CLI input into search requests and writes results as JSON,
separated from click parameter handling and resource management.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from itertools import islice
from typing import Any, Sequence

from HalSearch.services.search import HalSearchService
from HalSearch.utils.log import log


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """Search input collected from the command line.

    Attributes:
        search: Raw query string or search descriptor.
        options: Request options passed to the service.
    """

    search: Any
    options: dict[str, Any] = field(default_factory=dict)


def parse_search_request(
    *,
    search_json: str | None,
    raw_query: str | None,
    fields: Sequence[str] = (),
    extra: Sequence[str] = (),
) -> SearchRequest:
    """Build a search request from CLI values.

    Args:
        search_json: JSON search descriptor.
        raw_query: Raw Solr query string; wins over ``search_json``.
        fields: Field names to return.
        extra: ``key=value`` request options.

    Returns:
        Parsed search request.

    Raises:
        ValueError: If the JSON is invalid or an option has no ``=``.
    """
    if raw_query is not None and search_json is not None:
        raise ValueError("use either --search or --q, not both")

    search: Any = None
    if raw_query is not None:
        search = raw_query
    elif search_json is not None:
        try:
            search = json.loads(search_json)
        except json.JSONDecodeError as e:
            raise ValueError(f"--search is not valid JSON: {e}") from e

    options: dict[str, Any] = {}
    for item in extra:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"option must look like key=value: {item}")
        options[key.strip()] = value
    if fields:
        options["fields"] = list(fields)

    return SearchRequest(search=search, options=options)


def dump_json(value: Any, *, indent: int | None = 2) -> str:
    """Serialize a result for terminal output."""
    return json.dumps(value, ensure_ascii=False, indent=indent)


@dataclass(slots=True)
class SearchCommand:
    """Runs one search request against the service and echoes JSON."""

    service: HalSearchService
    request: SearchRequest
    echo: Callable[[str], None]

    def query(self) -> None:
        """Print the raw response body."""
        body = self.service.query(self.request.search, self.request.options)
        self.echo(dump_json(body))

    def find(self) -> None:
        """Print the matching documents as a JSON array."""
        docs = self.service.find(self.request.search, self.request.options)
        log.info("Fetched %d documents", len(docs))
        self.echo(dump_json(docs))

    def find_one(self) -> None:
        """Print the single matching document."""
        doc = self.service.find_one(self.request.search, self.request.options)
        self.echo(dump_json(doc))

    def stream(self, *, rows: int | None = None, limit: int | None = None) -> None:
        """Print every matching document, one JSON object per line.

        Args:
            rows: Page size override.
            limit: Stop after this many documents; no further pages are
                requested once reached.
        """
        stream = self.service.stream(self.request.search, self.request.options, rows=rows)
        docs = islice(stream, limit) if limit is not None else stream
        count = 0
        for doc in docs:
            self.echo(dump_json(doc, indent=None))
            count += 1
        log.info("Streamed %d documents in %d pages", count, stream.pages_fetched)
