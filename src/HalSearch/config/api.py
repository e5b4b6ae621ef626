"""API domain configuration: where and how HAL is reached."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import urlparse

from HalSearch.config.common import (
    expect_float,
    expect_optional_str,
    expect_str,
    get_required_value,
    get_section,
)


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """Store validated HAL endpoint settings.

    Attributes:
        host: API root URL.
        core: Core path segment (`search`, or `hal` for the select-all endpoint).
        timeout: Request timeout in seconds.
        proxy: Optional proxy URL used for every request.
    """

    host: str
    core: str
    timeout: float
    proxy: str | None


def load_api(raw: Mapping[str, Any]) -> ApiConfig:
    """Load the `api` section."""
    section = get_section(raw, "api", required=True)
    return ApiConfig(
        host=expect_str(get_required_value(section, "host", "api.host"), "api.host").strip(),
        core=expect_str(get_required_value(section, "core", "api.core"), "api.core").strip().strip("/"),
        timeout=expect_float(get_required_value(section, "timeout", "api.timeout"), "api.timeout"),
        proxy=expect_optional_str(section.get("proxy"), "api.proxy"),
    )


def check_api(config: ApiConfig) -> None:
    """Validate API constraints.

    Raises:
        ValueError: If values violate API constraints.
    """
    parsed = urlparse(config.host)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("api.host must be an http(s) URL")
    if not config.core:
        raise ValueError("api.core must not be empty")
    if config.timeout <= 0:
        raise ValueError("api.timeout must be positive")
    if config.proxy is not None and not urlparse(config.proxy).scheme:
        raise ValueError("api.proxy must be a URL")
