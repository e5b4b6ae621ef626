"""Command runner for coordinating CLI execution.

Manages component lifecycle, resource cleanup, logging configuration,
and error handling for command execution.
"""

from __future__ import annotations

from collections.abc import Callable

import click

from HalSearch.cli.commands import SearchCommand, SearchRequest
from HalSearch.config import AppConfig
from HalSearch.services import create_search_service
from HalSearch.sources.hal.client import HalApiClient
from HalSearch.utils.log import configure_logging, log


class CommandRunner:
    """Orchestrates command execution with proper resource management.

    Handles logging configuration, client creation and cleanup, and error
    handling for CLI commands.
    """

    def __init__(self, config: AppConfig, *, echo: Callable[[str], None] = click.echo) -> None:
        """Initialize command runner.

        Args:
            config: Application configuration.
            echo: Output function for results.
        """
        self.config = config
        self.echo = echo

    def run(self, action: str, request: SearchRequest, execute: Callable[[SearchCommand], None]) -> None:
        """Execute one command with a fresh HTTP client.

        Args:
            action: The CLI command name (e.g., 'find').
            request: Parsed search request.
            execute: Callback running the command.

        Raises:
            click.Abort: When the command fails.
        """
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        try:
            with HalApiClient(timeout=self.config.api.timeout) as client:
                service = create_search_service(self.config, client)
                command = SearchCommand(service=service, request=request, echo=self.echo)
                log.debug("Running %s: search=%s options=%s", action, request.search, request.options)
                execute(command)
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action, e)
            raise click.Abort from e
