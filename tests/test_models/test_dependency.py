from __future__ import annotations

import dataclasses

import pytest

from depfinder.models import DependencyEdge, PackageCoordinate


@pytest.mark.unit
class TestPackageCoordinate:
    """Tests for PackageCoordinate."""

    def test_str(self) -> None:
        assert str(PackageCoordinate("Serilog", "3.1.1")) == "Serilog@3.1.1"

    def test_is_frozen(self) -> None:
        """Test coordinates cannot be mutated after creation."""
        coordinate = PackageCoordinate("Serilog", "3.1.1")

        with pytest.raises(dataclasses.FrozenInstanceError):
            coordinate.version = "4.0.0"  # type: ignore[misc]


@pytest.mark.unit
class TestDependencyEdge:
    """Tests for DependencyEdge equality and serialization."""

    def test_equality_by_literal_text(self) -> None:
        """Test edges compare by exact name and range strings."""
        assert DependencyEdge("A", "[1.0.0, )") == DependencyEdge("A", "[1.0.0, )")
        assert DependencyEdge("A", "[1.0.0, )") != DependencyEdge("A", "[1.0.0,)")
        assert DependencyEdge("A", "[1.0.0, )") != DependencyEdge("a", "[1.0.0, )")

    def test_usable_in_sets(self) -> None:
        edges = {
            DependencyEdge("A", "[1.0.0, )"),
            DependencyEdge("A", "[1.0.0, )"),
            DependencyEdge("B", "[1.0.0, )"),
        }

        assert len(edges) == 2

    def test_to_json(self) -> None:
        """Test the JSON form uses the feed field names."""
        assert DependencyEdge("Serilog", "[3.1.1, )").to_json() == {
            "packageName": "Serilog",
            "versionRange": "[3.1.1, )",
        }

    def test_str(self) -> None:
        assert str(DependencyEdge("Serilog", "[3.1.1, )")) == "Serilog [3.1.1, )"
