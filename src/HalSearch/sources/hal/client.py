"""HAL API client.

Issues plain GET requests against the HAL Solr API and returns the decoded
JSON body. Requests are sent once: failures are reported, never retried.
"""

from __future__ import annotations

from typing import Mapping, Optional, Protocol

import requests

from HalSearch.core.errors import TransportError, UnexpectedResponseError
from HalSearch.core.models import HalResponse
from HalSearch.utils.log import log

DEFAULT_TIMEOUT = 30.0

HEADERS = {
    "User-Agent": "hal-search/0.1",
    "Accept": "application/json",
}


class Transport(Protocol):
    """Protocol for the HTTP layer used by the search service and streams."""

    def get(
        self,
        url: str,
        *,
        proxies: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HalResponse:
        """Fetch a URL and return status and decoded body."""
        raise NotImplementedError


class HalApiClient:
    """Low-level HTTP client for the HAL API.

    Responsible only for making network requests and decoding JSON. Shape
    checks and domain mapping are handled by the search service and stream.
    """

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize the client with a reusable HTTP session.

        Args:
            timeout: Default request timeout in seconds.
        """
        self._session = requests.Session()
        self._timeout = timeout

    def close(self) -> None:
        """Close the underlying HTTP session and release pooled connections.
        """
        self._session.close()

    def __enter__(self) -> HalApiClient:
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager and close session."""
        self.close()

    def get(
        self,
        url: str,
        *,
        proxies: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HalResponse:
        """Fetch a URL and decode its JSON body.

        Args:
            url: Fully built request URL.
            proxies: Optional `requests` proxies mapping.
            timeout: Optional request timeout in seconds.

        Returns:
            Status code and decoded body.

        Raises:
            TransportError: If the request fails at the network level.
            UnexpectedResponseError: If the body is not valid JSON.
        """
        log.debug("HAL request: url=%s", url)
        try:
            resp = self._session.get(
                url,
                headers=HEADERS,
                proxies=dict(proxies) if proxies else None,
                timeout=timeout or self._timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"HAL request failed: {e}") from e

        log.debug("HAL response: status=%s bytes=%s", resp.status_code, len(resp.content))
        try:
            body = resp.json()
        except ValueError as e:
            raise UnexpectedResponseError(
                f"unexpected result, body is not JSON (status {resp.status_code})",
                status=resp.status_code,
            ) from e
        return HalResponse(status=resp.status_code, body=body)
