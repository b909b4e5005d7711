"""
Feed descriptor model for depfinder.

Feeds are supplied by the caller (typically after reading the project's
NuGet configuration); depfinder only consumes them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Tuple

from depfinder.constants import SUPPORTED_PROTOCOL_VERSION


@dataclass(frozen=True)
class FeedDescriptor:
    """A remote package feed and the credentials used to query it.

    Args:
        repository_url: Service index URL of the feed.
        auth_header: Header material sent verbatim with every request to
            this feed. Empty for anonymous feeds.
        protocol_version: Protocol tag of the feed (``"v2"``, ``"v3"``).
    """

    repository_url: str
    auth_header: Mapping[str, str] = field(default_factory=dict, repr=False)
    protocol_version: str = SUPPORTED_PROTOCOL_VERSION

    @property
    def is_supported(self) -> bool:
        """Return True if the traversal can query this feed."""
        return self.protocol_version == SUPPORTED_PROTOCOL_VERSION


def select_supported_feeds(feeds: Iterable[FeedDescriptor]) -> Tuple[FeedDescriptor, ...]:
    """Keep only feeds speaking the supported protocol version, in order."""
    return tuple(feed for feed in feeds if feed.is_supported)
