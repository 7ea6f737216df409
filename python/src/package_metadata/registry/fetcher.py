"""
Registry Metadata Fetcher

This module issues the two registry queries the resolver needs:

- the registration (package metadata) resource, listing every published version
- the search query service, used only to read package owners

Each call is a fresh round-trip; results are never cached locally.
"""

import asyncio
from typing import Any

import httpx

from ..config import metadata_logger
from ..exceptions import FetchError
from ..models import CandidateMetadata
from ..versioning import NuGetVersion
from .connection import REGISTRATION_RESOURCE_TYPES, SEARCH_RESOURCE_TYPES, SourceRepository

# Legacy registries mark unlisted packages with this publish date
UNLISTED_PUBLISHED_PREFIX = "1900-01-01"


class MetadataFetcher:
    """Client for the registration and search resources of a registry source."""

    def __init__(self, semver_level: str = "2.0.0"):
        self.semver_level = semver_level

    async def fetch_candidates(
        self,
        connection: SourceRepository,
        identifier: str,
        include_prerelease: bool = True,
        include_unlisted: bool = False,
    ) -> list[CandidateMetadata]:
        """
        List metadata for every published version of a package.

        An unknown package yields an empty list, not an error.

        Raises:
            FetchError: The registry could not be queried or answered with a malformed document
        """
        base_url = connection.get_resource_url(REGISTRATION_RESOURCE_TYPES)
        index_url = f"{base_url.rstrip('/')}/{identifier.lower()}/index.json"

        index = await self._get_json(connection, index_url)
        if index is None:
            metadata_logger.debug(f"Package {identifier} not found at {connection.source.url}")
            return []

        pages = self._require_list(index, "items", index_url)
        leaves = await self._collect_leaves(connection, pages, index_url)

        candidates = []
        for leaf in leaves:
            entry = leaf.get("catalogEntry") if isinstance(leaf, dict) else None
            if not isinstance(entry, dict):
                raise FetchError(f"Malformed registration leaf in {index_url}", url=index_url)

            candidate = self._to_candidate(entry, identifier)
            if candidate is None:
                continue
            if not include_unlisted and not candidate.listed:
                continue
            if not include_prerelease and candidate.version.is_prerelease:
                continue
            candidates.append(candidate)

        metadata_logger.debug(f"Fetched {len(candidates)} candidate versions for {identifier}")
        return candidates

    async def fetch_owners(self, connection: SourceRepository, identifier: str) -> str:
        """Get the owners of a package from the first listed, stable search result."""
        search_url = connection.get_resource_url(SEARCH_RESOURCE_TYPES)
        params = {
            "q": identifier,
            "skip": 0,
            "take": 1,
            "prerelease": "false",
            "semVerLevel": self.semver_level,
        }

        data = await self._get_json(connection, search_url, params=params)
        if data is None:
            return ""

        results = self._require_list(data, "data", search_url)
        if not results or not isinstance(results[0], dict):
            return ""

        owners = results[0].get("owners")
        if isinstance(owners, list):
            return ", ".join(str(owner) for owner in owners)
        return owners or ""

    async def _collect_leaves(
        self,
        connection: SourceRepository,
        pages: list[Any],
        index_url: str,
    ) -> list[Any]:
        """Flatten registration pages, fetching the pages whose leaves are not inlined."""
        missing = [page for page in pages if isinstance(page, dict) and page.get("items") is None]
        for page in missing:
            if not page.get("@id"):
                raise FetchError(f"Registration page without @id in {index_url}", url=index_url)

        fetched = await asyncio.gather(*(self._get_json(connection, page["@id"]) for page in missing))

        page_items = {}
        for page, data in zip(missing, fetched):
            # The index points at this page, so a missing page is an inconsistent registry
            if data is None:
                raise FetchError(f"Registration page {page['@id']} listed in {index_url} was not found", url=page["@id"], status_code=404)
            page_items[id(page)] = self._require_list(data, "items", page["@id"])

        leaves = []
        for page in pages:
            if not isinstance(page, dict):
                raise FetchError(f"Malformed registration page in {index_url}", url=index_url)
            items = page.get("items")
            leaves.extend(items if items is not None else page_items[id(page)])

        return leaves

    def _to_candidate(self, entry: dict[str, Any], identifier: str) -> CandidateMetadata | None:
        """Convert a catalog entry, skipping entries whose version cannot be parsed."""
        version = NuGetVersion.try_parse(entry.get("version", ""))
        if version is None:
            metadata_logger.warning(f"Skipping {identifier} entry with malformed version: {entry.get('version')!r}")
            return None

        authors = entry.get("authors", "")
        if isinstance(authors, list):
            authors = ", ".join(str(author) for author in authors)

        license_expression = entry.get("licenseExpression") or None
        listed = entry.get("listed", True) is not False
        if str(entry.get("published", "")).startswith(UNLISTED_PUBLISHED_PREFIX):
            listed = False

        return CandidateMetadata(
            identifier=entry.get("id") or identifier,
            version=version,
            authors=authors or "",
            description=entry.get("description") or None,
            license=license_expression,
            license_expression=license_expression,
            license_url=entry.get("licenseUrl") or None,
            project_url=entry.get("projectUrl") or None,
            listed=listed,
        )

    def _require_list(self, data: Any, key: str, url: str) -> list[Any]:
        value = data.get(key, []) if isinstance(data, dict) else None
        if not isinstance(value, list):
            raise FetchError(f"Malformed registry response from {url}: expected '{key}' list", url=url)
        return value

    async def _get_json(
        self,
        connection: SourceRepository,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any | None:
        """GET a JSON document; 404 maps to None, every other failure to FetchError."""
        metadata_logger.debug(f"GET {url}")
        try:
            response = await connection.client.get(url, params=params)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            metadata_logger.error(f"Registry returned HTTP {status_code} for {url}")
            raise FetchError(f"Registry returned HTTP {status_code} for {url}", url=url, status_code=status_code) from e
        except httpx.HTTPError as e:
            metadata_logger.error(f"Error querying registry at {url}: {e}")
            raise FetchError(f"Error querying registry at {url}: {e}", url=url) from e
        except ValueError as e:
            metadata_logger.error(f"Malformed JSON from {url}: {e}")
            raise FetchError(f"Malformed JSON from {url}: {e}", url=url) from e
