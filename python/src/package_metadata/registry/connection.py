"""
Registry Connection

This module opens a registry source: it creates the HTTP client for the
source and loads the V3 service index that maps resource types to URLs.
"""

import asyncio
from typing import Any
from urllib.parse import urlsplit

import httpx

from ..config import ResolverSettings, metadata_logger
from ..exceptions import ConnectionFailedError, FetchError
from ..models import RegistrySource

REGISTRATION_RESOURCE_TYPES = (
    "RegistrationsBaseUrl/3.6.0",
    "RegistrationsBaseUrl/3.4.0",
    "RegistrationsBaseUrl/3.0.0-rc",
    "RegistrationsBaseUrl",
)

SEARCH_RESOURCE_TYPES = (
    "SearchQueryService/3.5.0",
    "SearchQueryService/3.0.0-rc",
    "SearchQueryService",
)


def parse_service_index(data: Any) -> dict[str, list[str]]:
    """Map each resource @type in a service index to the URLs that serve it."""
    if not isinstance(data, dict) or not isinstance(data.get("resources"), list):
        raise ValueError("service index has no 'resources' list")

    resources: dict[str, list[str]] = {}
    for resource in data["resources"]:
        if not isinstance(resource, dict) or not resource.get("@id"):
            continue
        types = resource.get("@type", [])
        if isinstance(types, str):
            types = [types]
        for resource_type in types:
            resources.setdefault(resource_type, []).append(resource["@id"])

    return resources


class SourceRepository:
    """An opened registry source: one HTTP client plus its service index."""

    def __init__(self, source: RegistrySource, client: httpx.AsyncClient, resources: dict[str, list[str]]):
        self.source = source
        self.client = client
        self.resources = resources

    @classmethod
    async def open(
        cls,
        source: RegistrySource,
        settings: ResolverSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SourceRepository":
        """
        Open a connection to a registry source.

        Args:
            source: Registry endpoint pointing at a V3 service index
            settings: Timeout and User-Agent configuration
            transport: Optional httpx transport (used to substitute a fake registry)

        Raises:
            ConnectionFailedError: The URL is malformed, the endpoint is unreachable
                or the service index is invalid
        """
        settings = settings or ResolverSettings()

        parts = urlsplit(source.url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConnectionFailedError(f"Malformed registry source URL: {source.url}", source_url=source.url)

        client = httpx.AsyncClient(
            timeout=settings.timeout,
            headers={
                "User-Agent": settings.user_agent,
                "Cache-Control": "no-cache",
            },
            follow_redirects=True,
            transport=transport,
        )

        try:
            response = await client.get(source.url)
            response.raise_for_status()
            resources = parse_service_index(response.json())

        except (httpx.HTTPError, ValueError) as e:
            await client.aclose()
            metadata_logger.error(f"Could not open registry source {source.url}: {e}")
            raise ConnectionFailedError(f"Could not open registry source {source.url}: {e}", source_url=source.url) from e
        except asyncio.CancelledError:
            await client.aclose()
            raise

        metadata_logger.debug(f"Opened registry source {source.url} with {len(resources)} resource types")
        return cls(source, client, resources)

    def get_resource_url(self, resource_types: tuple[str, ...]) -> str:
        """Return the URL of the first resource type the source exposes, in preference order."""
        for resource_type in resource_types:
            urls = self.resources.get(resource_type)
            if urls:
                return urls[0]

        raise FetchError(f"Registry source {self.source.url} does not expose any of: {', '.join(resource_types)}")

    @property
    def closed(self) -> bool:
        return self.client.is_closed

    async def aclose(self):
        """Close the HTTP client."""
        if not self.client.is_closed:
            await self.client.aclose()
