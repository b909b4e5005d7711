"""
Core functionality exports for depfinder.

    from depfinder.core import DependencyGraphBuilder
"""

from __future__ import annotations

from depfinder.core.sanitizer import sanitize_response
from depfinder.core.version_range import parse_minimum_version
from depfinder.core.feeds import (
    FeedAdapter,
    HostedArtifactFeedAdapter,
    StandardFeedAdapter,
    create_feed_adapter,
)
from depfinder.core.graph_builder import (
    DependencyGraphBuilder,
    DiscoveryResult,
    TraversalLimits,
)

__all__ = [
    "DependencyGraphBuilder",
    "DiscoveryResult",
    "TraversalLimits",
    "FeedAdapter",
    "StandardFeedAdapter",
    "HostedArtifactFeedAdapter",
    "create_feed_adapter",
    "parse_minimum_version",
    "sanitize_response",
]
