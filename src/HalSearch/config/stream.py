"""Stream domain configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from HalSearch.config.common import expect_int, get_required_value, get_section

MAX_ROWS = 10000


@dataclass(frozen=True, slots=True)
class StreamConfig:
    """Store validated cursor stream settings."""

    rows: int


def load_stream(raw: Mapping[str, Any]) -> StreamConfig:
    """Load the `stream` section."""
    section = get_section(raw, "stream", required=True)
    return StreamConfig(rows=expect_int(get_required_value(section, "rows", "stream.rows"), "stream.rows"))


def check_stream(config: StreamConfig) -> None:
    """Validate stream constraints.

    Raises:
        ValueError: If values violate stream constraints.
    """
    if config.rows <= 0 or config.rows > MAX_ROWS:
        raise ValueError(f"stream.rows must be between 1 and {MAX_ROWS}")
