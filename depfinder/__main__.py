"""
Executable module for depfinder.

Running ``python -m depfinder`` is equivalent to running ``depfinder``.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Report a CLI import failure on stderr."""
    sys.stderr.write("depfinder CLI could not be loaded.\n")
    sys.stderr.write(f"Python version : {sys.version}\n")
    try:
        from depfinder.__version__ import __version__

        sys.stderr.write(f"depfinder version: {__version__}\n")
    except ImportError:
        sys.stderr.write("depfinder version: <unknown>\n")
    sys.stderr.write("\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """Entry point for ``python -m depfinder``; returns the CLI exit code."""
    try:
        # Imported lazily so dependencies are only loaded for CLI use
        from depfinder.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
