"""
Centralized constants for depfinder.

This module defines immutable values used across depfinder, including
feed URL templates, manifest scope rules, traversal defaults, and logging
formats. All values are intended to be treated as read-only.
"""

import re
from typing import Final, FrozenSet, Pattern

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "depfinder/{version}"

# ---------------------------------------------------------------------------
# Feed endpoints
# ---------------------------------------------------------------------------

#: Service index of the public nuget.org v3 feed.
NUGET_ORG_V3_INDEX: Final[str] = "https://api.nuget.org/v3/index.json"

#: Protocol version tag of feeds the traversal can query.
SUPPORTED_PROTOCOL_VERSION: Final[str] = "v3"

#: Suffix of a v3 service index, replaced to reach the flat container.
SERVICE_INDEX_SUFFIX: Final[str] = "/index.json"

#: Replacement for :data:`SERVICE_INDEX_SUFFIX` in flat-container URLs.
FLAT_CONTAINER_SUFFIX: Final[str] = "-flatcontainer"

#: Per-package manifest path below the flat container.
NUSPEC_PATH_TEMPLATE: Final[str] = "{base}/{package_id}/{version}/{package_id}.nuspec"

#: Azure DevOps Artifacts feed URL shape (organization/project/feed).
AZURE_DEVOPS_FEED_PATTERN: Final[Pattern[str]] = re.compile(
    r"https://pkgs\.dev\.azure\.com/(?P<organization>[^/]+)/(?P<project>[^/]+)"
    r"/_packaging/(?P<feed_id>[^/]+)/nuget/v3/index\.json"
)

#: Azure DevOps packages-by-name query endpoint.
AZURE_DEVOPS_PACKAGES_URL: Final[str] = (
    "https://feeds.dev.azure.com/{organization}/{project}/_apis/packaging"
    "/Feeds/{feed_id}/packages"
)

#: API version pinned for Azure DevOps packaging calls.
AZURE_DEVOPS_API_VERSION: Final[str] = "7.0"

# ---------------------------------------------------------------------------
# Manifest parsing
# ---------------------------------------------------------------------------

#: Asset scopes that make a nuspec dependency relevant at consumption time.
#: Development-only scopes (build, analyzers, contentfiles) are left out.
ALLOWED_DEPENDENCY_SCOPES: Final[FrozenSet[str]] = frozenset(
    {"all", "compile", "native", "runtime"}
)

#: Lower bound of a NuGet version range, e.g. ``[1.2.3, 2.0)``.
VERSION_RANGE_MINIMUM_PATTERN: Final[Pattern[str]] = re.compile(
    r"[\[(](\d+(?:\.\d+)*(?:-\w+(?:\.\d+)*)?)"
)

#: Invisible characters some feeds wrap around response bodies.
ZERO_WIDTH_CHARACTERS: Final[str] = "\u200b\u200c\u200d\ufeff"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 3

# ---------------------------------------------------------------------------
# Traversal limits
# ---------------------------------------------------------------------------

#: Deepest chain of dependencies followed from the root.
DEFAULT_MAX_DEPTH: Final[int] = 64

#: Upper bound on package coordinates expanded in one traversal.
DEFAULT_MAX_NODES: Final[int] = 10_000

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
