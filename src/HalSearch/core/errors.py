"""Error taxonomy for HalSearch.

Every failure raised by the library derives from `HalSearchError` so callers
can catch the whole family at one boundary.
"""

from __future__ import annotations


class HalSearchError(Exception):
    """Base class for all HalSearch errors."""


class DescriptorFormatError(HalSearchError, ValueError):
    """A search descriptor or option value cannot be rendered as query text."""


class TransportError(HalSearchError):
    """The HTTP request failed before a response was received.

    The underlying `requests` exception is kept as ``__cause__``.
    """


class UnexpectedResponseError(HalSearchError):
    """The backend answered, but not with the expected status or body shape.

    Attributes:
        status: HTTP status code when known.
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class StreamStateError(HalSearchError, RuntimeError):
    """A cursor stream was pulled in a state that does not allow it."""
