"""
Shared context object for depfinder CLI commands.

An instance is created once per CLI invocation and handed to subcommands
through Click's context mechanism.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from depfinder.config import DepFinderConfig


class DepFinderContext:
    """Global context object for depfinder CLI commands.

    Attributes:
        config_path: Path to the configuration file, if one was loaded.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration; defaults until the group callback runs.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: DepFinderConfig = DepFinderConfig()


#: Click decorator for injecting :class:`DepFinderContext` into commands.
pass_context = click.make_pass_decorator(DepFinderContext, ensure=True)
