"""CLI package for HalSearch command orchestration.

This package contains the click interface, the command runner and the
command implementations.
"""

from __future__ import annotations

__all__ = ["CommandRunner", "cli", "main"]

from HalSearch.cli.runner import CommandRunner
from HalSearch.cli.ui import cli


def main() -> None:
    """Run HalSearch CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
