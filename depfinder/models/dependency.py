"""
Dependency graph data models for depfinder.

This module defines the immutable values that flow through a traversal:
package coordinates that are expanded, and the dependency edges a feed
declares for them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class PackageCoordinate:
    """A concrete, resolvable package state.

    Args:
        name: Package identifier as declared by the feed.
        version: Concrete version string.
    """

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class DependencyEdge:
    """A dependency declared by some package.

    Equality is by the literal ``(package_name, version_range)`` pair, so two
    edges naming the same package with different range text are distinct
    even when they resolve to the same version.

    Args:
        package_name: Identifier of the depended-upon package.
        version_range: Range expression as written in the feed response,
            e.g. ``"[1.2.3, )"``.
    """

    package_name: str
    version_range: str

    def __str__(self) -> str:
        return f"{self.package_name} {self.version_range}"

    def to_json(self) -> Dict[str, str]:
        """Return a JSON-serializable representation."""
        return {
            "packageName": self.package_name,
            "versionRange": self.version_range,
        }
