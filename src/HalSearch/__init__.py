"""HalSearch: structured queries and cursor streaming for the HAL API.

Typical use::

    from HalSearch import HalApiClient, HalSearchService

    with HalApiClient() as client:
        service = HalSearchService(client)
        docs = service.find({"authLastName_s": "Curie", "$not": {"docType_s": "THESE"}})
        for doc in service.stream({"structId_i": 1039}, {"fields": ["docid", "title_s"]}):
            ...
"""

from __future__ import annotations

from HalSearch.core.errors import (
    DescriptorFormatError,
    HalSearchError,
    StreamStateError,
    TransportError,
    UnexpectedResponseError,
)
from HalSearch.core.models import StreamState
from HalSearch.core.query import MATCH_ALL, build_query, to_query_string
from HalSearch.services.search import HalSearchService
from HalSearch.sources.hal.client import HalApiClient
from HalSearch.sources.hal.stream import HalCursorStream

__all__ = [
    "MATCH_ALL",
    "build_query",
    "to_query_string",
    "HalApiClient",
    "HalSearchService",
    "HalCursorStream",
    "StreamState",
    "HalSearchError",
    "DescriptorFormatError",
    "TransportError",
    "UnexpectedResponseError",
    "StreamStateError",
]
