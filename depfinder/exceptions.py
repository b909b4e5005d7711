"""
Custom exception hierarchy for depfinder.

All exceptions inherit from :class:`DepFinderError` and carry optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional


class DepFinderError(Exception):
    """Base exception for all depfinder errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class NetworkError(DepFinderError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class UnparseableResponseError(DepFinderError):
    """Raised when a feed response body is not the expected XML or JSON.

    The error is local to the fetch that produced it; the traversal treats
    the affected branch as having no dependencies.

    Args:
        message: Error description.
        url: URL whose body failed to parse.
        content_type: Expected body format (``"xml"`` or ``"json"``).
        original_error: Parser exception that triggered this error.
    """

    __slots__ = ("url", "content_type", "original_error")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        content_type: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "format", content_type)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.url = url
        self.content_type = content_type
        self.original_error = original_error


class ConfigError(DepFinderError):
    """Raised when a configuration file is missing, malformed or invalid.

    Args:
        message: Error description.
        config_path: Path of the configuration file involved.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class TraversalCancelledError(DepFinderError):
    """Raised when a dependency traversal observes its cancel signal.

    Args:
        message: Error description.
        nodes_expanded: Number of coordinates expanded before cancellation.
    """

    __slots__ = ("nodes_expanded",)

    def __init__(
        self,
        message: str = "Dependency traversal cancelled",
        *,
        nodes_expanded: Optional[int] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "nodes_expanded", nodes_expanded)

        super().__init__(message, details)

        self.nodes_expanded = nodes_expanded
