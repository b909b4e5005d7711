"""
Console output utilities for depfinder using Rich.

User-facing output of CLI commands goes through this module. Diagnostic
output belongs in :mod:`depfinder.utils.logger`.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Optional

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

DEPFINDER_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "package": "bold magenta",
    }
)

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return the process-wide Rich Console, creating it on first use."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=DEPFINDER_THEME,
                    no_color=not use_color,
                    highlight=use_color,
                )
    return _console


def reconfigure_console() -> None:
    """Drop the cached console so the next call re-reads ``NO_COLOR``."""
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    """Return the underlying Rich Console instance."""
    return _get_console()


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _get_console().print(f"{prefix} {message}", style="success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _get_console().print(f"{prefix} {message}", style="error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _get_console().print(f"{prefix} {message}", style="warning")


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Render rows of dictionaries as a Rich table.

    Args:
        data: List of row dictionaries. Nothing is printed when empty.
        headers: Column order. Defaults to the keys of the first row.
        title: Optional table title.
        caption: Optional table caption.
        column_styles: Per-column ``style`` / ``justify`` / ``no_wrap``.
    """
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    table = Table(title=title, caption=caption, show_header=True, header_style="bold")

    column_styles = column_styles or {}
    for header in headers:
        config = column_styles.get(header, {})
        table.add_column(
            header,
            style=config.get("style"),
            justify=config.get("justify", "default"),
            no_wrap=config.get("no_wrap", False),
            overflow="fold",
        )

    for row in data:
        table.add_row(*(str(row.get(h, "")) for h in headers))

    _get_console().print(table)
