"""
HTTP client utilities for depfinder.

This module provides an asynchronous HTTP client with retry logic. Client
errors (4xx) are returned to the caller untouched so feed adapters can
decide what a non-success status means for their branch of the traversal.
Every httpx failure leaves this module as
:class:`~depfinder.exceptions.NetworkError`.
"""

from __future__ import annotations

import httpx
import random
import asyncio
from typing import Any, Optional

from depfinder.utils.logger import get_logger
from depfinder.__version__ import __version__
from depfinder.exceptions import NetworkError
from depfinder.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


class HTTPClient:
    """Asynchronous HTTP client with retries.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Maximum number of retry attempts.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.

    Example:
        >>> async with HTTPClient() as client:
        ...     response = await client.get(nuspec_url, headers=feed.auth_header)
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)

        self._client: Optional[httpx.AsyncClient] = None
        self._max_429_retries: int = 5

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute an HTTP request with retry and backoff logic.

        Timeouts, transport failures (connection, protocol, proxy) and 5xx
        responses are retried with exponential backoff. 429 responses honor
        ``Retry-After``. Any other response, including 4xx, is returned
        as-is.

        Raises:
            NetworkError: Retries were exhausted, or the request can never
                succeed (invalid URL, redirect loop, undecodable body).
        """
        await self._ensure_client()
        assert self._client is not None

        clean_url = url.strip().strip("\"'")
        last_exc: Optional[Exception] = None
        retry_429_count = 0

        for attempt in range(self.max_retries + 1):
            try:
                response = await self._client.request(method, clean_url, **kwargs)

                if response.status_code == 429:
                    retry_429_count += 1
                    if retry_429_count > self._max_429_retries:
                        raise NetworkError(
                            f"Rate limit exceeded after {self._max_429_retries} retries",
                            url=clean_url,
                            status_code=429,
                        )
                    try:
                        retry_after = int(response.headers.get("Retry-After", "1"))
                    except ValueError:
                        # HTTP-date form
                        retry_after = 1
                    logger.warning(
                        "Rate limited (429), retrying after %ds (%d/%d)",
                        retry_after,
                        retry_429_count,
                        self._max_429_retries,
                    )
                    await asyncio.sleep(retry_after)
                    continue

                if response.status_code >= 500:
                    response.raise_for_status()

                return response

            except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
                raise NetworkError(
                    f"Invalid request URL: {exc}",
                    url=clean_url,
                ) from exc

            except httpx.TimeoutException as exc:
                last_exc = exc
                logger.warning(
                    "Request timeout (%d/%d): %s",
                    attempt + 1,
                    self.max_retries + 1,
                    clean_url,
                )

            except httpx.TransportError as exc:
                last_exc = exc
                logger.warning(
                    "%s (%d/%d): %s",
                    type(exc).__name__,
                    attempt + 1,
                    self.max_retries + 1,
                    exc,
                )

            except httpx.HTTPStatusError as exc:
                last_exc = exc
                logger.warning(
                    "HTTP %d error (%d/%d): %s",
                    exc.response.status_code,
                    attempt + 1,
                    self.max_retries + 1,
                    clean_url,
                )

            except httpx.HTTPError as exc:
                # TooManyRedirects, DecodingError
                raise NetworkError(
                    f"Request failed: {exc}",
                    url=clean_url,
                ) from exc

            if attempt < self.max_retries:
                delay = (2**attempt) + random.uniform(0.0, 0.3)
                logger.debug("Retrying in %.2fs", delay)
                await asyncio.sleep(delay)

        status_code = None
        if isinstance(last_exc, httpx.HTTPStatusError):
            status_code = last_exc.response.status_code

        raise NetworkError(
            f"Request failed after {self.max_retries + 1} attempts: {clean_url}",
            url=clean_url,
            status_code=status_code,
        ) from last_exc

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request with retry logic."""
        return await self._request_with_retry("GET", url, **kwargs)
