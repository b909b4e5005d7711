"""
NuGet version range helpers for depfinder.

Only the lower bound of a range matters to the traversal: it is the
version expanded next. Ranges are not evaluated or intersected.
"""

from __future__ import annotations

from typing import Optional

from depfinder.constants import VERSION_RANGE_MINIMUM_PATTERN


def parse_minimum_version(range_expression: Optional[str]) -> Optional[str]:
    """Extract the minimum version from a bracketed version range.

    The expression must contain an opening bracket (``[`` or ``(``)
    immediately followed by a dotted numeric version, optionally with a
    hyphenated pre-release suffix.

    Args:
        range_expression: Range text as declared by the feed.

    Returns:
        The captured version, or ``None`` when no lower bound is present
        (bare versions, unbounded or malformed ranges).

    Examples:
        >>> parse_minimum_version("[1.2.3, 2.0.0)")
        '1.2.3'
        >>> parse_minimum_version("[2.0.0-beta.1,)")
        '2.0.0-beta.1'
        >>> parse_minimum_version("1.2.3") is None
        True
    """
    if not range_expression:
        return None

    match = VERSION_RANGE_MINIMUM_PATTERN.search(range_expression)
    if match is None:
        return None
    return match.group(1)
