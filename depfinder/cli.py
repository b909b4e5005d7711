"""
Command-line interface for depfinder.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from depfinder.config import load_config
from depfinder.__version__ import __version__
from depfinder.context import DepFinderContext
from depfinder.exceptions import ConfigError, DepFinderError
from depfinder.commands.discover import discover
from depfinder.utils.logger import get_logger, setup_logging, verbosity_to_level
from depfinder.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="DEPFINDER_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="DEPFINDER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="depfinder",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """depfinder: transitive dependency discovery for NuGet packages.

    \b
    Examples:
      depfinder discover Newtonsoft.Json 13.0.3
      depfinder -v discover Serilog 3.1.1 --format json

    Use ``depfinder COMMAND --help`` for command-specific options.
    """
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    depfinder_ctx = DepFinderContext()
    depfinder_ctx.config_path = loaded_config.source_path
    depfinder_ctx.color = color
    depfinder_ctx.verbose = verbose
    depfinder_ctx.config = loaded_config
    ctx.obj = depfinder_ctx

    logger.debug("depfinder v%s", __version__)
    logger.debug("Config path: %s", depfinder_ctx.config_path)
    logger.debug("Configuration: %s", loaded_config.to_log_dict())


cli.add_command(discover)


def main() -> int:
    """Main entry point for the depfinder CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.exceptions.Exit as exc:
        return exc.exit_code

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    except DepFinderError as exc:
        print_error(str(exc))
        logger.debug(
            "DepFinderError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
