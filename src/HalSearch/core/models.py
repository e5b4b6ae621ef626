from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from HalSearch.core.errors import UnexpectedResponseError


@dataclass(frozen=True, slots=True)
class HalResponse:
    """Raw transport result.

    Attributes:
        status: HTTP status code.
        body: Decoded JSON body.
    """

    status: int
    body: Any


@dataclass(frozen=True, slots=True)
class ResultPage:
    """Validated view of one Solr result body.

    The backend answers with::

        {"response": {"docs": [...], "numFound": 42}, "nextCursorMark": "..."}

    Documents are kept as opaque mappings; nothing here looks inside them.

    Attributes:
        docs: Documents in backend order.
        num_found: Total number of matches reported by the backend.
        next_cursor_mark: Continuation token, present on cursor requests only.
    """

    docs: list[dict[str, Any]]
    num_found: int
    next_cursor_mark: str | None = None

    @classmethod
    def from_body(cls, body: Any, *, require_cursor: bool = False) -> ResultPage:
        """Validate a decoded response body.

        Args:
            body: Decoded JSON body.
            require_cursor: Whether ``nextCursorMark`` must be present.

        Returns:
            Parsed result page.

        Raises:
            UnexpectedResponseError: If the body does not have the expected shape.
        """
        if not isinstance(body, Mapping):
            raise UnexpectedResponseError("unexpected result, body is not an object")
        response = body.get("response")
        if not isinstance(response, Mapping):
            raise UnexpectedResponseError("unexpected result, documents not found")
        docs = response.get("docs")
        if not isinstance(docs, list):
            raise UnexpectedResponseError("unexpected result, documents not found")
        num_found = response.get("numFound")
        if isinstance(num_found, bool) or not isinstance(num_found, int):
            raise UnexpectedResponseError("unexpected result, numFound missing or not an integer")

        next_cursor_mark = body.get("nextCursorMark")
        if next_cursor_mark is not None and not isinstance(next_cursor_mark, str):
            raise UnexpectedResponseError("unexpected result, nextCursorMark is not a string")
        if require_cursor and next_cursor_mark is None:
            raise UnexpectedResponseError("unexpected result, nextCursorMark missing")

        return cls(docs=list(docs), num_found=num_found, next_cursor_mark=next_cursor_mark)


class StreamState(Enum):
    """Lifecycle of a cursor stream.

    IDLE -> FETCHING -> (IDLE | DONE | ERRORED)
    """

    IDLE = "idle"
    FETCHING = "fetching"
    DONE = "done"
    ERRORED = "errored"
