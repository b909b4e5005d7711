"""Discover command implementation for depfinder.

Lists every package that a given package version depends on, directly or
transitively, according to the configured NuGet feeds.

Typical usage::

    # Transitive dependencies from nuget.org
    $ depfinder discover Microsoft.Extensions.Logging 8.0.0

    # nuget.org plus a private Azure DevOps feed; the PAT is only sent to
    # the Azure DevOps feed. Machine-readable output.
    $ depfinder discover Contoso.Core 2.1.0 \\
        --feed https://api.nuget.org/v3/index.json \\
        --feed https://pkgs.dev.azure.com/contoso/tools/_packaging/main/nuget/v3/index.json \\
        --header https://pkgs.dev.azure.com/contoso/tools/_packaging/main/nuget/v3/index.json \\
            "Authorization: Basic <token>" --format json
"""

from __future__ import annotations

import sys
import json
import click
import asyncio
from typing import Dict, List, Optional, Sequence, Tuple

from depfinder.models import FeedDescriptor
from depfinder.constants import NUGET_ORG_V3_INDEX
from depfinder.exceptions import DepFinderError
from depfinder.context import pass_context, DepFinderContext
from depfinder.core import DependencyGraphBuilder, DiscoveryResult, TraversalLimits
from depfinder.utils import (
    HTTPClient,
    get_logger,
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.discover")


def _parse_headers(
    values: Tuple[Tuple[str, str], ...],
    feed_urls: Sequence[str],
) -> Dict[str, Dict[str, str]]:
    """Group repeated ``FEED_URL 'Name: value'`` options by feed URL.

    Raises:
        click.BadParameter: A header is malformed or names a feed that is
            not being queried.
    """
    headers: Dict[str, Dict[str, str]] = {url: {} for url in feed_urls}
    for feed_url, raw in values:
        if feed_url not in headers:
            raise click.BadParameter(
                f"{feed_url!r} is not one of the queried feeds", param_hint="--header"
            )
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(
                f"expected 'Name: value', got {raw!r}", param_hint="--header"
            )
        headers[feed_url][name.strip()] = value.strip()
    return headers


@click.command()
@click.argument("name")
@click.argument("version")
@click.option(
    "--feed",
    "feeds",
    multiple=True,
    metavar="URL",
    help="NuGet v3 service index to query. Repeatable. Defaults to nuget.org.",
)
@click.option(
    "--header",
    "headers",
    multiple=True,
    nargs=2,
    metavar="FEED_URL 'NAME: VALUE'",
    help="HTTP header sent only to the given feed, e.g. an Authorization header. Repeatable.",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    default=None,
    help="Longest dependency chain to follow.",
)
@click.option(
    "--max-nodes",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of package versions to expand.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def discover(
    ctx: DepFinderContext,
    name: str,
    version: str,
    feeds: Tuple[str, ...],
    headers: Tuple[Tuple[str, str], ...],
    max_depth: Optional[int],
    max_nodes: Optional[int],
    format: str,
) -> None:
    """Discover the transitive dependencies of NAME at VERSION.

    Every dependency's range is expanded at its minimum version. Branches
    whose lookups fail are reported and skipped.

    Exits:
        0 on success (including packages without dependencies), 1 on error.
    """
    feed_urls = feeds or (NUGET_ORG_V3_INDEX,)
    auth_headers = _parse_headers(headers, feed_urls)
    descriptors = [FeedDescriptor(url, auth_header=auth_headers[url]) for url in feed_urls]
    limits = TraversalLimits(
        max_depth=max_depth or ctx.config.max_depth,
        max_nodes=max_nodes or ctx.config.max_nodes,
    )

    try:
        result = asyncio.run(_discover_async(ctx, descriptors, name, version, limits))
    except DepFinderError as e:
        print_error(f"{e}")
        sys.exit(1)

    _display(result, format)


async def _discover_async(
    ctx: DepFinderContext,
    feeds: List[FeedDescriptor],
    name: str,
    version: str,
    limits: TraversalLimits,
) -> DiscoveryResult:
    logger.info("Discovering dependencies of %s@%s", name, version)

    async with HTTPClient(
        timeout=ctx.config.timeout,
        max_retries=ctx.config.max_retries,
    ) as http:
        builder = DependencyGraphBuilder.from_feeds(feeds, http, limits=limits)
        return await builder.traverse(name, version)


# ---------------------------------------------------------------------------
# Renderers
# ---------------------------------------------------------------------------


def _display(result: DiscoveryResult, format: str) -> None:
    format = format.lower()

    if format == "json":
        _display_json(result)
        return

    if format == "table":
        _display_table(result)
    else:
        _display_simple(result)

    for failure in result.failed_fetches:
        print_warning(failure)
    if result.truncated:
        print_warning("Traversal limits reached; the dependency set may be incomplete")


def _display_table(result: DiscoveryResult) -> None:
    if not result.dependencies:
        print_success(f"{result.root} has no dependencies")
        return

    rows = [
        {"Package": edge.package_name, "Version range": edge.version_range}
        for edge in result.sorted_dependencies()
    ]
    print_table(
        rows,
        title=f"Dependencies of {result.root}",
        caption=f"{len(rows)} dependencies, {result.nodes_expanded} packages expanded",
        column_styles={"Package": {"style": "package", "no_wrap": True}},
    )


def _display_simple(result: DiscoveryResult) -> None:
    """One ``name range`` line per edge, for piping to other tools."""
    console = get_raw_console()
    for edge in result.sorted_dependencies():
        console.print(str(edge), markup=False, highlight=False)


def _display_json(result: DiscoveryResult) -> None:
    """Render the result as JSON.

    Example::

        {
          "package": "Serilog.Sinks.File",
          "version": "5.0.0",
          "dependencies": [{"packageName": "Serilog", "versionRange": "[2.10.0, )"}],
          "nodesExpanded": 2,
          "truncated": false,
          "failedFetches": []
        }
    """
    data = {
        "package": result.root.name,
        "version": result.root.version,
        "dependencies": [edge.to_json() for edge in result.sorted_dependencies()],
        "nodesExpanded": result.nodes_expanded,
        "truncated": result.truncated,
        "failedFetches": list(result.failed_fetches),
    }
    print(json.dumps(data, indent=2))
