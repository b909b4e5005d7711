"""Configuration file loader for depfinder.

Two formats are supported:

- ``depfinder.toml``: settings under a ``[depfinder]`` table
- ``pyproject.toml``: settings under a ``[tool.depfinder]`` table

Discovery order:

1. Explicit path from ``--config`` or ``DEPFINDER_CONFIG``
2. ``depfinder.toml`` in the current directory
3. ``pyproject.toml`` with a ``[tool.depfinder]`` section

Configuration precedence: defaults < config file < CLI options.

Example (``depfinder.toml``)::

    [depfinder]
    max_depth = 32
    max_nodes = 5000
    timeout = 20
    max_retries = 2
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from depfinder.exceptions import ConfigError
from depfinder.utils.logger import get_logger
from depfinder.constants import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_NODES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
)

logger = get_logger("config")

#: Integer options and their smallest accepted value.
_INT_OPTIONS: Dict[str, int] = {
    "max_depth": 1,
    "max_nodes": 1,
    "timeout": 1,
    "max_retries": 0,
}


@dataclass
class DepFinderConfig:
    """Parsed and validated depfinder configuration.

    Attributes:
        max_depth: Longest dependency chain followed from the root package.
        max_nodes: Maximum number of package versions expanded per run.
        timeout: HTTP request timeout in seconds.
        max_retries: Retries for timeouts, connection errors and 5xx.
        source_path: Path to the loaded file, or ``None`` for defaults.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_nodes: int = DEFAULT_MAX_NODES
    timeout: int = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES

    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return the user-facing options for debug logging."""
        return {name: getattr(self, name) for name in _INT_OPTIONS}


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to the config file, or ``None`` if none was found.

    Raises:
        ConfigError: ``explicit_path`` was given but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    depfinder_toml = cwd / "depfinder.toml"
    if depfinder_toml.is_file():
        logger.debug("Found depfinder.toml: %s", depfinder_toml)
        return depfinder_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_depfinder_section(pyproject_toml):
        logger.debug("Found [tool.depfinder] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_depfinder_section(path: Path) -> bool:
    """Return True if ``path`` parses and contains ``[tool.depfinder]``.

    An unreadable pyproject is not ours to complain about; it is skipped.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "depfinder" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> DepFinderConfig:
    """Load and validate depfinder configuration.

    Args:
        config_path: Explicit path to a config file. If ``None``, uses
            :func:`discover_config_file`.

    Returns:
        Validated :class:`DepFinderConfig`; defaults when no file exists.

    Raises:
        ConfigError: The file cannot be parsed, has unknown keys, or holds
            invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        return DepFinderConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("depfinder", {})
    else:
        section = raw.get("depfinder", {})

    if not section:
        logger.debug("Config file has no depfinder section, using defaults")
        return DepFinderConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: The file cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> DepFinderConfig:
    """Validate a ``[depfinder]`` table and build a config from it.

    Raises:
        ConfigError: Unknown keys, non-integer values, or values below the
            option's minimum.
    """
    unknown = set(section.keys()) - set(_INT_OPTIONS)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    config = DepFinderConfig()

    for option, minimum in _INT_OPTIONS.items():
        if option not in section:
            continue

        value = section[option]
        # bool is an int subclass; `max_depth = true` is still a mistake.
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(
                f"{option} must be an integer, got {type(value).__name__}",
                config_path=config_path,
                option=option,
            )
        if value < minimum:
            raise ConfigError(
                f"{option} must be at least {minimum}, got {value}",
                config_path=config_path,
                option=option,
            )
        setattr(config, option, value)

    return config
