"""Search service layer for HalSearch.

Provides the HAL search service and a factory building it from configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from HalSearch.services.search import HalSearchService

if TYPE_CHECKING:
    from HalSearch.config import AppConfig
    from HalSearch.sources.hal.client import HalApiClient


def create_search_service(config: AppConfig, client: HalApiClient | None = None) -> HalSearchService:
    """Create a search service bound to the configured endpoint.

    Args:
        config: Application configuration containing API settings.
        client: Optional existing client; a new one is created otherwise.

    Returns:
        Configured HalSearchService instance.
    """
    if client is None:
        from HalSearch.sources.hal.client import HalApiClient

        client = HalApiClient(timeout=config.api.timeout)

    return HalSearchService(
        client=client,
        host=config.api.host,
        core=config.api.core,
        rows=config.stream.rows,
        proxy=config.api.proxy,
    )


__all__ = [
    "HalSearchService",
    "create_search_service",
]
