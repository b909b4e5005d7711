"""
Utility helpers for depfinder.

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Async HTTP client

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

from depfinder.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)
from depfinder.utils.console import (
    get_raw_console,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)
from depfinder.utils.http import HTTPClient

__all__ = [
    # Console
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "verbosity_to_level",
    # HTTP
    "HTTPClient",
]
