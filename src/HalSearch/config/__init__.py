from __future__ import annotations

"""Public configuration API for HalSearch."""

from HalSearch.config.api import ApiConfig
from HalSearch.config.app import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    load_config,
    load_config_with_defaults,
    parse_config_dict,
)
from HalSearch.config.runtime import RuntimeConfig
from HalSearch.config.stream import StreamConfig

__all__ = [
    "RuntimeConfig",
    "ApiConfig",
    "StreamConfig",
    "AppConfig",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "load_config_with_defaults",
    "parse_config_dict",
]
