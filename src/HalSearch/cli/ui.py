"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to the command runner.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import click
from dotenv import load_dotenv

from HalSearch.cli.commands import SearchCommand, SearchRequest, parse_search_request
from HalSearch.cli.runner import CommandRunner
from HalSearch.config import load_config_with_defaults


@click.group(help="HalSearch: query the HAL archive API and print JSON.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False, exists=True),
    default=None,
    help="YAML config merged onto the built-in defaults.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """CLI entry group.

    Loads environment variables from .env file (proxy settings such as
    HTTPS_PROXY are read by requests) before processing config.
    """
    load_dotenv()

    ctx.obj = load_config_with_defaults(config_path)


def search_options(func: Callable) -> Callable:
    """Attach the options shared by every search command."""
    func = click.option(
        "--option",
        "extra",
        multiple=True,
        metavar="KEY=VALUE",
        help="Extra Solr parameter, e.g. fq=producedDateY_i:2020. Repeatable.",
    )(func)
    func = click.option("--fields", "-f", multiple=True, help="Field to return (fl). Repeatable.")(func)
    func = click.option("--q", "raw_query", default=None, help="Raw Solr query string.")(func)
    func = click.option("--search", "-s", "search_json", default=None, help="JSON search descriptor.")(func)
    return func


def _request_from(search_json: str | None, raw_query: str | None, fields: tuple[str, ...], extra: tuple[str, ...]) -> SearchRequest:
    try:
        return parse_search_request(search_json=search_json, raw_query=raw_query, fields=fields, extra=extra)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _run(ctx: click.Context, request: SearchRequest, execute: Callable[[SearchCommand], None]) -> None:
    runner = CommandRunner(ctx.obj)
    runner.run(ctx.command.name, request, execute)


@cli.command("query")
@search_options
@click.pass_context
def query_cmd(ctx: click.Context, search_json, raw_query, fields, extra) -> None:
    """Print the raw JSON response of a query."""
    _run(ctx, _request_from(search_json, raw_query, fields, extra), SearchCommand.query)


@cli.command("find")
@search_options
@click.pass_context
def find_cmd(ctx: click.Context, search_json, raw_query, fields, extra) -> None:
    """Print the documents of a query."""
    _run(ctx, _request_from(search_json, raw_query, fields, extra), SearchCommand.find)


@cli.command("find-one")
@search_options
@click.pass_context
def find_one_cmd(ctx: click.Context, search_json, raw_query, fields, extra) -> None:
    """Print the only document matching a query; fails on zero or several."""
    _run(ctx, _request_from(search_json, raw_query, fields, extra), SearchCommand.find_one)


@cli.command("stream")
@search_options
@click.option("--rows", type=click.IntRange(min=1), default=None, help="Page size (default from config).")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Stop after this many documents.")
@click.pass_context
def stream_cmd(ctx: click.Context, search_json, raw_query, fields, extra, rows, limit) -> None:
    """Stream every matching document as JSON lines using cursor paging."""
    request = _request_from(search_json, raw_query, fields, extra)
    _run(ctx, request, lambda command: command.stream(rows=rows, limit=limit))
