"""HAL request building.

Turns caller options into Solr request parameters and a request URL.

Option handling
- `host`  -> API root (default `http://api.archives-ouvertes.fr`)
- `core`  -> path segment (default `search`); `hal` maps to
             `/solr/hal/api/selectall`
- `proxy` -> moved out of the query string into `requests` proxies
- `fields` -> alias for `fl`; a list `fl` is joined with commas
- anything else (`rows`, `sort`, `start`, `fq`, ...) is sent as-is
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote, urlencode

from HalSearch.core.errors import DescriptorFormatError

DEFAULT_HOST = "http://api.archives-ouvertes.fr"
DEFAULT_CORE = "search"
HAL_CORE = "hal"

_RESERVED_PARAMS = frozenset({"wt", "q"})


@dataclass(frozen=True, slots=True)
class RequestOptions:
    """Normalized request options.

    Attributes:
        params: Solr parameters appended after `wt` and `q`, in caller order.
        proxies: `requests` proxies mapping, if a proxy was given.
        host: API root URL.
        core: Core path segment.
    """

    params: dict[str, str]
    proxies: dict[str, str] | None
    host: str
    core: str


def normalize_options(
    options: Mapping[str, Any] | None,
    *,
    host: str = DEFAULT_HOST,
    core: str = DEFAULT_CORE,
) -> RequestOptions:
    """Normalize caller options without mutating them.

    Args:
        options: Caller options.
        host: Host used when options do not set one.
        core: Core used when options do not set one.

    Returns:
        Normalized request options.

    Raises:
        DescriptorFormatError: If an option value cannot be sent as text, or
            `wt` / `q` are passed as options.
    """
    remaining = dict(options or {})

    proxies = _normalize_proxy(remaining.pop("proxy", None))
    resolved_host = str(remaining.pop("host", None) or host)
    resolved_core = str(remaining.pop("core", None) or core)

    if "fields" in remaining:
        remaining["fl"] = remaining.pop("fields")

    params: dict[str, str] = {}
    for key, value in remaining.items():
        if key in _RESERVED_PARAMS:
            raise DescriptorFormatError(f"option {key!r} is set by the client and cannot be overridden")
        if key == "fl" and isinstance(value, (list, tuple)):
            value = ",".join(render_option(item, key) for item in value)
        params[key] = render_option(value, key)

    return RequestOptions(params=params, proxies=proxies, host=resolved_host, core=resolved_core)


def build_url(query: str, params: Mapping[str, str], *, host: str = DEFAULT_HOST, core: str = DEFAULT_CORE) -> str:
    """Build a request URL for the given query and parameters.

    Args:
        query: Final `q` value.
        params: Additional Solr parameters.
        host: API root URL.
        core: Core path segment.

    Returns:
        Full request URL.
    """
    root = host.rstrip("/")
    if core == HAL_CORE:
        base = f"{root}/solr/hal/api/selectall"
    else:
        base = f"{root}/{core}/"

    pairs: list[tuple[str, str]] = [("wt", "json"), ("q", query)]
    pairs.extend((key, value) for key, value in params.items())
    return f"{base}?{urlencode(pairs, quote_via=quote)}"


def render_option(value: Any, key: str) -> str:
    """Render one option value as text.

    Booleans are written the way Solr expects them (`true` / `false`).

    Raises:
        DescriptorFormatError: If the value is not a string, number or boolean.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if not isinstance(value, (str, int, float)):
        raise DescriptorFormatError(f"option {key!r} must be a string or a number, got {type(value).__name__}")
    return str(value)


def _normalize_proxy(proxy: Any) -> dict[str, str] | None:
    """Convert the `proxy` option into a `requests` proxies mapping.

    A single URL applies to both schemes; a mapping is used as given.
    """
    if proxy is None:
        return None
    if isinstance(proxy, str):
        url = proxy.strip()
        return {"http": url, "https": url} if url else None
    if isinstance(proxy, Mapping):
        return {str(scheme): str(url) for scheme, url in proxy.items()}
    raise DescriptorFormatError(f"option 'proxy' must be a URL or a mapping, got {type(proxy).__name__}")
