"""
depfinder: transitive dependency discovery for NuGet feeds.

Given a package id and version, depfinder queries one or more NuGet v3
feeds (nuget.org style flat containers and Azure DevOps Artifacts feeds)
and enumerates every dependency edge reachable from that package.

Example::

    import asyncio
    from depfinder import DependencyGraphBuilder, FeedDescriptor, HTTPClient

    async def main():
        feeds = [FeedDescriptor("https://api.nuget.org/v3/index.json")]
        async with HTTPClient() as http:
            builder = DependencyGraphBuilder.from_feeds(feeds, http)
            return await builder.discover("Serilog.Sinks.File", "5.0.0")

    edges = asyncio.run(main())
"""

from __future__ import annotations

from depfinder.__version__ import __version__
from depfinder.models import (
    DependencyEdge,
    FeedDescriptor,
    PackageCoordinate,
    select_supported_feeds,
)
from depfinder.core import (
    DependencyGraphBuilder,
    DiscoveryResult,
    TraversalLimits,
    create_feed_adapter,
)
from depfinder.utils.http import HTTPClient

__author__ = "depfinder Contributors"
__license__ = "Apache-2.0"
__description__ = "Transitive dependency discovery for NuGet package feeds."

__all__ = [
    "__version__",
    "DependencyEdge",
    "DependencyGraphBuilder",
    "DiscoveryResult",
    "FeedDescriptor",
    "HTTPClient",
    "PackageCoordinate",
    "TraversalLimits",
    "create_feed_adapter",
    "select_supported_feeds",
]
