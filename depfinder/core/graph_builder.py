"""Transitive dependency discovery for depfinder.

:class:`DependencyGraphBuilder` walks the dependency graph of one package
version across every configured feed. Each expansion asks all feed
adapters for the declared dependencies of a coordinate, records every new
edge in the traversal's visited set, and schedules the minimum version of
each edge's range for expansion.

The walk is depth-first and strictly sequential. Edges are deduplicated by
their literal ``(package_name, version_range)`` text, so two differently
written ranges that resolve to the same version are both expanded. Since
that key alone does not guarantee termination against adversarial feeds,
every traversal is bounded by :class:`TraversalLimits` and may be stopped
early through a cancel signal.

Typical usage::

    from depfinder.utils.http import HTTPClient
    from depfinder.models import FeedDescriptor
    from depfinder.core.graph_builder import DependencyGraphBuilder

    feeds = [FeedDescriptor("https://api.nuget.org/v3/index.json")]

    async with HTTPClient() as http:
        builder = DependencyGraphBuilder.from_feeds(feeds, http)
        result = await builder.traverse("Microsoft.Extensions.Logging", "8.0.0")

        for edge in sorted(result.dependencies, key=str):
            print(edge)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Protocol, Sequence, Set, Tuple

from depfinder.core.feeds import FeedAdapter, create_feed_adapter
from depfinder.core.version_range import parse_minimum_version
from depfinder.exceptions import (
    NetworkError,
    TraversalCancelledError,
    UnparseableResponseError,
)
from depfinder.models import (
    DependencyEdge,
    FeedDescriptor,
    PackageCoordinate,
    select_supported_feeds,
)
from depfinder.constants import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES
from depfinder.utils.http import HTTPClient
from depfinder.utils.logger import get_logger

logger = get_logger("graph_builder")

__all__ = [
    "CancelSignal",
    "DependencyGraphBuilder",
    "DiscoveryResult",
    "TraversalLimits",
]


class CancelSignal(Protocol):
    """Anything with ``is_set()``: ``asyncio.Event`` or ``threading.Event``."""

    def is_set(self) -> bool: ...


# ---------------------------------------------------------------------------
# Traversal models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TraversalLimits:
    """Bounds applied to a single traversal.

    Attributes:
        max_depth: Longest dependency chain expanded from the root. Edges
            found deeper are still reported but not expanded.
        max_nodes: Maximum number of coordinates expanded (feed lookups).
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_nodes: int = DEFAULT_MAX_NODES

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.max_nodes < 1:
            raise ValueError(f"max_nodes must be at least 1, got {self.max_nodes}")


@dataclass(frozen=True)
class DiscoveryResult:
    """Outcome of one traversal.

    Attributes:
        root: Coordinate the traversal started from.
        dependencies: Every edge reachable from ``root`` (unordered).
        nodes_expanded: Number of coordinates whose dependencies were fetched.
        truncated: ``True`` if a limit stopped the walk before the frontier
            was exhausted.
        failed_fetches: ``"<coordinate> via <feed>: <reason>"`` for every
            feed lookup that failed and was treated as having no
            dependencies.
    """

    root: PackageCoordinate
    dependencies: FrozenSet[DependencyEdge]
    nodes_expanded: int
    truncated: bool = False
    failed_fetches: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.dependencies)

    def sorted_dependencies(self) -> List[DependencyEdge]:
        """Return edges ordered case-insensitively by name, then range."""
        return sorted(
            self.dependencies,
            key=lambda edge: (edge.package_name.lower(), edge.version_range),
        )


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class DependencyGraphBuilder:
    """Discover the transitive dependency edges of a package version.

    Args:
        adapters: One adapter per feed, queried in order at every node.
        limits: Depth and node bounds for each traversal.
        cancel_signal: Checked before every expansion; when set the
            traversal raises :class:`TraversalCancelledError`.

    Example::

        >>> builder = DependencyGraphBuilder([adapter])
        >>> edges = await builder.discover("Serilog", "3.1.1")
    """

    def __init__(
        self,
        adapters: Sequence[FeedAdapter],
        *,
        limits: Optional[TraversalLimits] = None,
        cancel_signal: Optional[CancelSignal] = None,
    ) -> None:
        self.adapters: Tuple[FeedAdapter, ...] = tuple(adapters)
        self.limits = limits or TraversalLimits()
        self.cancel_signal = cancel_signal

    @classmethod
    def from_feeds(
        cls,
        feeds: Iterable[FeedDescriptor],
        http: HTTPClient,
        *,
        limits: Optional[TraversalLimits] = None,
        cancel_signal: Optional[CancelSignal] = None,
    ) -> "DependencyGraphBuilder":
        """Build adapters for every supported feed and wrap them in a builder.

        Feeds not tagged with the supported protocol version are ignored.
        """
        supported = select_supported_feeds(feeds)
        adapters = [create_feed_adapter(feed, http) for feed in supported]
        logger.debug("Using %d feed adapter(s): %s", len(adapters), adapters)
        return cls(adapters, limits=limits, cancel_signal=cancel_signal)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def discover(
        self,
        root_name: str,
        root_version: str,
    ) -> FrozenSet[DependencyEdge]:
        """Return the dependency edges reachable from ``root_name@root_version``."""
        result = await self.traverse(root_name, root_version)
        return result.dependencies

    async def traverse(self, root_name: str, root_version: str) -> DiscoveryResult:
        """Walk the dependency graph rooted at ``root_name@root_version``.

        Algorithm outline:

        1. Pop the most recently scheduled coordinate from the worklist.
        2. Fetch its edges from every adapter and concatenate them.
        3. For each edge, in received order: skip empty or already visited
           edges; skip edges whose range has no lower bound; otherwise
           record the edge and schedule its minimum version.
        4. Stop when the worklist is empty or a limit is reached.

        Raises:
            TraversalCancelledError: The cancel signal was set.
        """
        root = PackageCoordinate(root_name, root_version)
        visited: Set[DependencyEdge] = set()
        failures: List[str] = []
        stack: List[Tuple[PackageCoordinate, int]] = [(root, 0)]
        nodes_expanded = 0
        truncated = False

        while stack:
            if self.cancel_signal is not None and self.cancel_signal.is_set():
                raise TraversalCancelledError(nodes_expanded=nodes_expanded)

            if nodes_expanded >= self.limits.max_nodes:
                logger.warning(
                    "Stopping traversal of %s after %d nodes; %d pending",
                    root,
                    nodes_expanded,
                    len(stack),
                )
                truncated = True
                break

            coordinate, depth = stack.pop()
            nodes_expanded += 1
            logger.debug("Expanding %s (depth %d)", coordinate, depth)

            edges = await self._fetch_edges(coordinate, failures)
            children: List[Tuple[PackageCoordinate, int]] = []

            for edge in edges:
                if edge is None or not edge.package_name or edge in visited:
                    continue

                minimum = parse_minimum_version(edge.version_range)
                if minimum is None:
                    logger.debug("Skipping %s: no minimum version in range", edge)
                    continue

                visited.add(edge)

                if depth + 1 > self.limits.max_depth:
                    truncated = True
                    continue
                children.append((PackageCoordinate(edge.package_name, minimum), depth + 1))

            # Reversed so the first received edge is expanded first.
            stack.extend(reversed(children))

        logger.info(
            "Discovered %d dependencies of %s in %d expansions",
            len(visited),
            root,
            nodes_expanded,
        )
        return DiscoveryResult(
            root=root,
            dependencies=frozenset(visited),
            nodes_expanded=nodes_expanded,
            truncated=truncated,
            failed_fetches=tuple(failures),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _fetch_edges(
        self,
        coordinate: PackageCoordinate,
        failures: List[str],
    ) -> List[DependencyEdge]:
        """Concatenate the edges every adapter reports for ``coordinate``.

        A failing adapter contributes nothing; the others still count.
        """
        edges: List[DependencyEdge] = []

        for adapter in self.adapters:
            try:
                edges.extend(
                    await adapter.fetch_dependencies(coordinate.name, coordinate.version)
                )
            except (NetworkError, UnparseableResponseError) as exc:
                logger.warning(
                    "Could not read dependencies of %s from %s: %s",
                    coordinate,
                    adapter.feed.repository_url,
                    exc,
                )
                failures.append(f"{coordinate} via {adapter.feed.repository_url}: {exc}")

        return edges
