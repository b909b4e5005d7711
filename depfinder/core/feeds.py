"""Feed adapters: fetch the declared dependencies of one package version.

Two NuGet v3 protocol flavours are supported:

1. **Standard feeds** expose a flat container holding each package's
   ``.nuspec`` manifest at a predictable URL. One request per lookup.
2. **Azure DevOps Artifacts feeds** track packages by guid, so the
   versions endpoint of a package can only be discovered through a
   packages-by-name query. Two requests per lookup.

The flavour is chosen once per feed by :func:`create_feed_adapter`, based
on the shape of the feed URL.

Every adapter follows the same failure contract: a non-200 response means
the package contributes no dependencies through this feed and yields an
empty list. Transport failures surface as
:class:`~depfinder.exceptions.NetworkError` and unreadable bodies as
:class:`~depfinder.exceptions.UnparseableResponseError`; the graph builder
confines both to the branch being expanded.

Typical usage::

    async with HTTPClient() as http:
        adapter = create_feed_adapter(feed, http)
        edges = await adapter.fetch_dependencies("Newtonsoft.Json", "13.0.3")
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from urllib.parse import urljoin, urlsplit
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Set

from depfinder.models import DependencyEdge, FeedDescriptor
from depfinder.utils.http import HTTPClient
from depfinder.utils.logger import get_logger
from depfinder.core.sanitizer import sanitize_response
from depfinder.exceptions import UnparseableResponseError
from depfinder.constants import (
    ALLOWED_DEPENDENCY_SCOPES,
    AZURE_DEVOPS_API_VERSION,
    AZURE_DEVOPS_FEED_PATTERN,
    AZURE_DEVOPS_PACKAGES_URL,
    FLAT_CONTAINER_SUFFIX,
    NUSPEC_PATH_TEMPLATE,
    SERVICE_INDEX_SUFFIX,
)

logger = get_logger("feeds")

__all__ = [
    "FeedAdapter",
    "StandardFeedAdapter",
    "HostedArtifactFeedAdapter",
    "create_feed_adapter",
    "is_dependency_in_scope",
]


# ---------------------------------------------------------------------------
# Base adapter
# ---------------------------------------------------------------------------


class FeedAdapter(ABC):
    """Dependency lookup against a single feed.

    Args:
        feed: The feed to query. Its ``auth_header`` is sent with every
            request.
        http: Shared HTTP client.
    """

    def __init__(self, feed: FeedDescriptor, http: HTTPClient) -> None:
        self.feed = feed
        self.http = http

    @abstractmethod
    async def fetch_dependencies(
        self,
        package_id: str,
        package_version: str,
    ) -> List[DependencyEdge]:
        """Return the dependency edges declared by ``package_id@package_version``.

        Raises:
            NetworkError: The feed could not be reached.
            UnparseableResponseError: The feed answered with a body that is
                not the expected document.
        """

    async def _get_text(self, url: str, **kwargs: Any) -> Optional[str]:
        """GET ``url`` with the feed credentials; ``None`` unless status is 200."""
        response = await self.http.get(url, headers=dict(self.feed.auth_header), **kwargs)

        if response.status_code != 200:
            logger.debug("HTTP %d from %s, no dependencies", response.status_code, url)
            return None

        return sanitize_response(response.content)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.feed.repository_url!r})"


# ---------------------------------------------------------------------------
# Standard flat-container feeds
# ---------------------------------------------------------------------------


def _scope_tokens(value: str) -> Set[str]:
    return {token.strip() for token in value.split(",")}


def is_dependency_in_scope(attributes: Dict[str, str]) -> bool:
    """Decide whether a nuspec ``<dependency>`` applies at consumption time.

    Args:
        attributes: Namespace-free attribute map of the element.

    Returns:
        ``True`` when neither ``include`` nor ``exclude`` is present, when
        ``include`` names an allowed scope, or when only ``exclude`` is
        present and names none of them.

    Example::

        >>> is_dependency_in_scope({"include": "compile,runtime"})
        True
        >>> is_dependency_in_scope({"exclude": "all"})
        False
    """
    include = attributes.get("include")
    exclude = attributes.get("exclude")

    if include is None and exclude is None:
        return True
    if include is not None:
        return bool(_scope_tokens(include) & ALLOWED_DEPENDENCY_SCOPES)
    return not _scope_tokens(exclude) & ALLOWED_DEPENDENCY_SCOPES


def _local_name(name: str) -> str:
    """Drop a ``{namespace}`` qualifier from an element or attribute name."""
    return name.rsplit("}", 1)[-1]


def _strip_namespaces(root: ET.Element) -> None:
    for element in root.iter():
        if isinstance(element.tag, str):
            element.tag = _local_name(element.tag)
        if element.attrib:
            element.attrib = {_local_name(k): v for k, v in element.attrib.items()}


def _iter_dependency_elements(root: ET.Element) -> Iterator[ET.Element]:
    """Yield ``<dependency>`` elements, flat or grouped under ``<group>``."""
    for dependencies in root.iter("dependencies"):
        for child in dependencies:
            if child.tag == "dependency":
                yield child
            else:
                yield from child.findall("dependency")


class StandardFeedAdapter(FeedAdapter):
    """Reads dependencies from the ``.nuspec`` manifest in the flat container."""

    def manifest_url(self, package_id: str, package_version: str) -> str:
        """Build the flat-container ``.nuspec`` URL for a package version.

        Example::

            >>> adapter.manifest_url("Newtonsoft.Json", "13.0.3")
            'https://api.nuget.org/v3-flatcontainer/newtonsoft.json/13.0.3/newtonsoft.json.nuspec'
        """
        base = self.feed.repository_url.replace(SERVICE_INDEX_SUFFIX, FLAT_CONTAINER_SUFFIX)
        lowered = package_id.lower()
        return NUSPEC_PATH_TEMPLATE.format(
            base=base,
            package_id=lowered,
            version=package_version,
        )

    async def fetch_dependencies(
        self,
        package_id: str,
        package_version: str,
    ) -> List[DependencyEdge]:
        url = self.manifest_url(package_id, package_version)
        body = await self._get_text(url)
        if body is None:
            return []

        return self.parse_manifest(body, url=url)

    @staticmethod
    def parse_manifest(body: str, *, url: Optional[str] = None) -> List[DependencyEdge]:
        """Extract in-scope dependency edges from nuspec XML.

        Raises:
            UnparseableResponseError: ``body`` is not well-formed XML.
        """
        try:
            root = ET.fromstring(body)
        except ET.ParseError as exc:
            raise UnparseableResponseError(
                "Malformed nuspec manifest",
                url=url,
                content_type="xml",
                original_error=exc,
            ) from exc

        _strip_namespaces(root)

        edges: List[DependencyEdge] = []
        for element in _iter_dependency_elements(root):
            attributes = dict(element.attrib)
            package_name = attributes.get("id")
            if not package_name or not is_dependency_in_scope(attributes):
                continue
            edges.append(DependencyEdge(package_name, attributes.get("version", "")))

        return edges


# ---------------------------------------------------------------------------
# Azure DevOps Artifacts feeds
# ---------------------------------------------------------------------------


def _load_value_list(body: str, *, url: str) -> List[Dict[str, Any]]:
    """Parse a ``{"value": [{...}, ...]}`` envelope returned by Azure DevOps."""
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise UnparseableResponseError(
            "Invalid JSON response",
            url=url,
            content_type="json",
            original_error=exc,
        ) from exc

    value = data.get("value") if isinstance(data, dict) else None
    if not isinstance(value, list) or not all(isinstance(entry, dict) for entry in value):
        raise UnparseableResponseError(
            "Expected a JSON object with a 'value' list of objects",
            url=url,
            content_type="json",
        )
    return value


def _optional_str(entry: Dict[str, Any], key: str, *, url: str) -> Optional[str]:
    """Return ``entry[key]``, or ``None`` when absent or null.

    Raises:
        UnparseableResponseError: The value is present but not a string.
    """
    value = entry.get(key)
    if value is None or isinstance(value, str):
        return value
    raise UnparseableResponseError(
        f"Expected '{key}' to be a string, got {type(value).__name__}",
        url=url,
        content_type="json",
    )


def _versions_link(entry: Dict[str, Any], *, base_url: str) -> Optional[str]:
    """Return the absolute versions URL of a package entry, if it has one.

    Relative links are resolved against ``base_url``.

    Raises:
        UnparseableResponseError: The link does not resolve to an http(s) URL.
    """
    links = entry.get("_links")
    versions = links.get("versions") if isinstance(links, dict) else None
    if not isinstance(versions, dict):
        return None

    href = _optional_str(versions, "href", url=base_url)
    if not href:
        return None

    resolved = urljoin(base_url, href)
    parts = urlsplit(resolved)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise UnparseableResponseError(
            f"Unsupported versions link {href!r}",
            url=base_url,
            content_type="json",
        )
    return resolved


class HostedArtifactFeedAdapter(FeedAdapter):
    """Two-step dependency lookup for Azure DevOps Artifacts feeds.

    Raises:
        ValueError: If the feed URL is not an Azure DevOps feed URL.
    """

    def __init__(self, feed: FeedDescriptor, http: HTTPClient) -> None:
        super().__init__(feed, http)

        match = AZURE_DEVOPS_FEED_PATTERN.search(feed.repository_url)
        if match is None:
            raise ValueError(f"Not an Azure DevOps feed URL: {feed.repository_url}")

        self.organization = match.group("organization")
        self.project = match.group("project")
        self.feed_id = match.group("feed_id")

    @property
    def packages_url(self) -> str:
        return AZURE_DEVOPS_PACKAGES_URL.format(
            organization=self.organization,
            project=self.project,
            feed_id=self.feed_id,
        )

    async def fetch_dependencies(
        self,
        package_id: str,
        package_version: str,
    ) -> List[DependencyEdge]:
        versions_url = await self._find_versions_url(package_id)
        if versions_url is None:
            return []

        body = await self._get_text(versions_url)
        if body is None:
            return []

        edges: List[DependencyEdge] = []
        for entry in _load_value_list(body, url=versions_url):
            if _optional_str(entry, "version", url=versions_url) != package_version:
                continue

            dependencies = entry.get("dependencies") or []
            if not isinstance(dependencies, list):
                raise UnparseableResponseError(
                    "Expected 'dependencies' to be a list",
                    url=versions_url,
                    content_type="json",
                )

            for dependency in dependencies:
                if not isinstance(dependency, dict):
                    raise UnparseableResponseError(
                        "Expected dependency entries to be objects",
                        url=versions_url,
                        content_type="json",
                    )
                package_name = _optional_str(dependency, "packageName", url=versions_url)
                if package_name:
                    version_range = _optional_str(dependency, "versionRange", url=versions_url)
                    edges.append(DependencyEdge(package_name, version_range or ""))

        return edges

    async def _find_versions_url(self, package_id: str) -> Optional[str]:
        """Resolve the guid-based versions URL of ``package_id``.

        The last entry whose name equals ``package_id`` decides.
        """
        params = {
            "protocolType": "nuget",
            "packageNameQuery": package_id,
            "api-version": AZURE_DEVOPS_API_VERSION,
        }
        body = await self._get_text(self.packages_url, params=params)
        if body is None:
            return None

        versions_url: Optional[str] = None
        for entry in _load_value_list(body, url=self.packages_url):
            if _optional_str(entry, "name", url=self.packages_url) == package_id:
                versions_url = _versions_link(entry, base_url=self.packages_url)

        if versions_url is None:
            logger.debug("No versions link for %s in feed %s", package_id, self.feed_id)
        return versions_url


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_feed_adapter(feed: FeedDescriptor, http: HTTPClient) -> FeedAdapter:
    """Pick the adapter matching the shape of ``feed.repository_url``."""
    if AZURE_DEVOPS_FEED_PATTERN.search(feed.repository_url):
        return HostedArtifactFeedAdapter(feed, http)
    return StandardFeedAdapter(feed, http)
