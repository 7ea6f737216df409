"""
Package Metadata Resolver

This module assembles package metadata: it picks the best published version of
a package on a registry source and joins its metadata with the package owners.
"""

import asyncio
from collections.abc import Iterable

from .config import ResolverSettings, metadata_logger
from .exceptions import InvalidRequestError
from .models import RegistrySource, ResolvedPackageMetadata
from .registry import ConnectionCache, MetadataFetcher
from .versioning import FloatBehavior, parse_requested_version, select_version


class PackageMetadataResolver:
    """Resolves a package identifier and optional version into registry metadata."""

    def __init__(
        self,
        cache: ConnectionCache | None = None,
        fetcher: MetadataFetcher | None = None,
        settings: ResolverSettings | None = None,
        float_behavior: FloatBehavior = FloatBehavior.PREFER_STABLE,
    ):
        self.settings = settings if settings is not None else ResolverSettings()
        # ConnectionCache defines __len__, so an empty cache is falsy
        self.cache = cache if cache is not None else ConnectionCache(settings=self.settings)
        self.fetcher = fetcher if fetcher is not None else MetadataFetcher(semver_level=self.settings.semver_level)
        self.float_behavior = float_behavior
        self.default_source = RegistrySource(self.settings.default_source_url)

    async def resolve(
        self,
        identifier: str,
        version: str | None = None,
        source: RegistrySource | None = None,
    ) -> ResolvedPackageMetadata | None:
        """
        Resolve metadata for a package.

        Args:
            identifier: Package identifier
            version: Exact version to match; the latest eligible version is used when empty
            source: Registry source; the default source is used when omitted

        Returns:
            The resolved metadata, or None when no published version matches

        Raises:
            InvalidRequestError: Empty identifier or malformed version (before any network call)
            ConnectionFailedError: The registry source could not be opened
            FetchError: A registry query failed
        """
        if not identifier or not identifier.strip():
            raise InvalidRequestError("Package identifier must not be empty")
        identifier = identifier.strip()

        requested_version = None
        if version and version.strip():
            requested_version = parse_requested_version(version)

        source = source or self.default_source
        connection = await self.cache.get_connection(source)

        candidates = await self.fetcher.fetch_candidates(
            connection,
            identifier,
            include_prerelease=True,
            include_unlisted=False,
        )

        matched = select_version(candidates, requested_version, self.float_behavior)
        if matched is None:
            metadata_logger.info(
                "No matching package version",
                package=identifier,
                version=version or "latest",
                source=source.url,
            )
            return None

        # Owners are per package, not per version
        owners = await self.fetcher.fetch_owners(connection, identifier)

        metadata_logger.debug(f"Resolved {identifier} to {matched.version} on {source.url}")
        return ResolvedPackageMetadata.from_candidate(matched, owners, source)

    async def resolve_many(
        self,
        requests: Iterable[str | tuple[str, str | None]],
        source: RegistrySource | None = None,
    ) -> list[ResolvedPackageMetadata | None]:
        """Resolve several packages concurrently, returning results in request order."""
        # Validate every request before starting any of them
        normalized = []
        for request in requests:
            if isinstance(request, str):
                normalized.append((request, None))
            elif isinstance(request, tuple) and len(request) == 2:
                normalized.append(request)
            else:
                raise InvalidRequestError(f"Expected identifier or (identifier, version), got {request!r}")

        tasks = [asyncio.ensure_future(self.resolve(identifier, version, source)) for identifier, version in normalized]

        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # First failure wins; stop the requests still in flight
            for task in tasks:
                task.cancel()
            raise

    async def aclose(self):
        """Close every registry connection held by the cache."""
        await self.cache.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()


# Global metadata resolver instance
_metadata_resolver: PackageMetadataResolver | None = None


def get_metadata_resolver() -> PackageMetadataResolver:
    """Get the global package metadata resolver instance."""
    global _metadata_resolver
    if _metadata_resolver is None:
        _metadata_resolver = PackageMetadataResolver(settings=ResolverSettings.from_env())
    return _metadata_resolver
