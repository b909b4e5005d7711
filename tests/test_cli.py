"""Tests for the depfinder CLI group and the ``discover`` command."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from depfinder import cli as cli_module
from depfinder.cli import cli, main
from depfinder.core import DiscoveryResult, TraversalLimits
from depfinder.exceptions import DepFinderError, NetworkError
from depfinder.models import DependencyEdge, PackageCoordinate
from depfinder.utils.logger import disable_logging

RESULT = DiscoveryResult(
    root=PackageCoordinate("Serilog.Sinks.File", "5.0.0"),
    dependencies=frozenset(
        {DependencyEdge("Serilog", "[2.10.0, )"), DependencyEdge("System.Memory", "[4.5.5, )")}
    ),
    nodes_expanded=3,
)


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every command from an empty directory without color."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEPFINDER_CONFIG", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    yield
    disable_logging()


@pytest.fixture
def mock_discover() -> Iterator[AsyncMock]:
    with patch(
        "depfinder.commands.discover._discover_async", new_callable=AsyncMock
    ) as mocked:
        mocked.return_value = RESULT
        yield mocked


def _invoke(*args: str):
    return CliRunner().invoke(cli, ["--no-color", *args])


@pytest.mark.unit
class TestDiscoverCommand:
    """Tests for ``depfinder discover``."""

    def test_json_output(self, mock_discover: AsyncMock) -> None:
        result = _invoke("discover", "Serilog.Sinks.File", "5.0.0", "--format", "json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["package"] == "Serilog.Sinks.File"
        assert data["dependencies"] == [
            {"packageName": "Serilog", "versionRange": "[2.10.0, )"},
            {"packageName": "System.Memory", "versionRange": "[4.5.5, )"},
        ]
        assert data["nodesExpanded"] == 3
        assert data["truncated"] is False

    def test_simple_output(self, mock_discover: AsyncMock) -> None:
        result = _invoke("discover", "Serilog.Sinks.File", "5.0.0", "-f", "simple")

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            "Serilog [2.10.0, )",
            "System.Memory [4.5.5, )",
        ]

    def test_table_output(self, mock_discover: AsyncMock) -> None:
        result = _invoke("discover", "Serilog.Sinks.File", "5.0.0")

        assert result.exit_code == 0, result.output
        assert "Serilog" in result.output
        assert "System.Memory" in result.output

    def test_defaults_to_nuget_org(self, mock_discover: AsyncMock) -> None:
        _invoke("discover", "A", "1.0.0")

        _, feeds, name, version, limits = mock_discover.await_args.args
        assert [feed.repository_url for feed in feeds] == ["https://api.nuget.org/v3/index.json"]
        assert (name, version) == ("A", "1.0.0")
        assert limits == TraversalLimits()

    def test_feeds_headers_and_limits(self, mock_discover: AsyncMock) -> None:
        result = _invoke(
            "discover",
            "A",
            "1.0.0",
            "--feed",
            "https://a.test/v3/index.json",
            "--feed",
            "https://b.test/v3/index.json",
            "--header",
            "https://b.test/v3/index.json",
            "Authorization: Basic abc",
            "--max-depth",
            "4",
            "--max-nodes",
            "40",
        )

        assert result.exit_code == 0, result.output
        _, feeds, _, _, limits = mock_discover.await_args.args
        assert [feed.repository_url for feed in feeds] == [
            "https://a.test/v3/index.json",
            "https://b.test/v3/index.json",
        ]
        assert feeds[0].auth_header == {}
        assert feeds[1].auth_header == {"Authorization": "Basic abc"}
        assert limits == TraversalLimits(max_depth=4, max_nodes=40)

    def test_limits_from_config_file(self, tmp_path: Path, mock_discover: AsyncMock) -> None:
        (tmp_path / "depfinder.toml").write_text(
            "[depfinder]\nmax_depth = 7\nmax_nodes = 70\n", encoding="utf-8"
        )

        result = _invoke("discover", "A", "1.0.0")

        assert result.exit_code == 0, result.output
        assert mock_discover.await_args.args[4] == TraversalLimits(max_depth=7, max_nodes=70)

    def test_malformed_header_is_usage_error(self, mock_discover: AsyncMock) -> None:
        result = _invoke(
            "discover", "A", "1.0.0", "--header", "https://api.nuget.org/v3/index.json", "no-colon"
        )

        assert result.exit_code == 2
        mock_discover.assert_not_called()

    def test_header_for_unknown_feed_is_usage_error(self, mock_discover: AsyncMock) -> None:
        """Test credentials cannot be bound to a feed that is not queried."""
        result = _invoke(
            "discover",
            "A",
            "1.0.0",
            "--feed",
            "https://a.test/v3/index.json",
            "--header",
            "https://other.test/v3/index.json",
            "Authorization: Basic abc",
        )

        assert result.exit_code == 2
        mock_discover.assert_not_called()

    def test_header_for_default_feed(self, mock_discover: AsyncMock) -> None:
        result = _invoke(
            "discover",
            "A",
            "1.0.0",
            "--header",
            "https://api.nuget.org/v3/index.json",
            "X-NuGet-ApiKey: k",
        )

        assert result.exit_code == 0, result.output
        feeds = mock_discover.await_args.args[1]
        assert feeds[0].auth_header == {"X-NuGet-ApiKey": "k"}

    def test_zero_max_nodes_rejected(self, mock_discover: AsyncMock) -> None:
        result = _invoke("discover", "A", "1.0.0", "--max-nodes", "0")

        assert result.exit_code == 2

    def test_no_dependencies_message(self, mock_discover: AsyncMock) -> None:
        mock_discover.return_value = DiscoveryResult(
            root=PackageCoordinate("Leaf", "1.0.0"), dependencies=frozenset(), nodes_expanded=1
        )

        result = _invoke("discover", "Leaf", "1.0.0")

        assert result.exit_code == 0
        assert "Leaf@1.0.0 has no dependencies" in result.output

    def test_truncation_and_failures_are_reported(self, mock_discover: AsyncMock) -> None:
        mock_discover.return_value = DiscoveryResult(
            root=RESULT.root,
            dependencies=RESULT.dependencies,
            nodes_expanded=3,
            truncated=True,
            failed_fetches=("Serilog@2.10.0 via https://x/v3/index.json: bad xml",),
        )

        result = _invoke("discover", "Serilog.Sinks.File", "5.0.0", "-f", "simple")

        assert "bad xml" in result.output
        assert "Traversal limits reached" in result.output

    def test_depfinder_error_exits_one(self, mock_discover: AsyncMock) -> None:
        mock_discover.side_effect = NetworkError("offline")

        result = _invoke("discover", "A", "1.0.0")

        assert result.exit_code == 1
        assert "offline" in result.output


@pytest.mark.unit
class TestCliGroup:
    """Tests for global options."""

    def test_version(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert result.output.startswith("depfinder ")

    def test_invalid_config_exits_one(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.toml"
        bad.write_text("[depfinder]\nmax_depth = 'deep'\n", encoding="utf-8")

        result = CliRunner().invoke(cli, ["--config", str(bad), "discover", "A", "1.0.0"])

        assert result.exit_code == 1
        assert "max_depth must be an integer" in result.output


@pytest.mark.unit
class TestMainFunction:
    """Tests for depfinder.cli.main exit codes."""

    def test_success(self, mock_discover: AsyncMock) -> None:
        with patch("sys.argv", ["depfinder", "discover", "A", "1.0.0", "-f", "json"]):
            assert main() == 0

    def test_usage_error(self) -> None:
        with patch("sys.argv", ["depfinder", "discover"]):
            assert main() == 2

    def test_depfinder_error(self) -> None:
        with patch.object(cli_module, "cli", side_effect=DepFinderError("broken")):
            assert main() == 1

    def test_keyboard_interrupt(self) -> None:
        with patch.object(cli_module, "cli", side_effect=KeyboardInterrupt):
            assert main() == 130

    def test_unexpected_error(self) -> None:
        with patch.object(cli_module, "cli", side_effect=RuntimeError("bug")):
            assert main() == 1
