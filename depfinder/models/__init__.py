"""
Unified data model exports for depfinder.

Example:
    >>> from depfinder.models import DependencyEdge, FeedDescriptor
"""

from __future__ import annotations

from depfinder.models.dependency import DependencyEdge, PackageCoordinate
from depfinder.models.feed import FeedDescriptor, select_supported_feeds

__all__ = [
    "DependencyEdge",
    "PackageCoordinate",
    "FeedDescriptor",
    "select_supported_feeds",
]
