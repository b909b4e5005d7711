"""
depfinder version information.

This module provides a single source of truth for the package version.
It follows Semantic Versioning: https://semver.org/
"""

from __future__ import annotations

import re

__version__ = "0.1.0"


def _parse_version(version: str):
    """Break a release version into its numeric components.

    Returns:
        dict: ``{"major": int, "minor": int, "patch": int, "prerelease": str | None}``
    """
    match = re.match(r"^(\d+)\.(\d+)\.(\d+)(?:[.-]([a-zA-Z0-9]+))?$", version)
    if not match:
        raise ValueError(f"Invalid version string: {version}")

    major, minor, patch, pre = match.groups()
    return {
        "major": int(major),
        "minor": int(minor),
        "patch": int(patch),
        "prerelease": pre,
    }


VERSION_INFO = _parse_version(__version__)

VERSION_STRING = f"depfinder {__version__}"
