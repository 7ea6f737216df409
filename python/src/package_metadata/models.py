"""
Package Metadata Models

This module defines the data models used by the metadata resolver.
"""

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from .config import DEFAULT_SOURCE_URL
from .versioning import NuGetVersion


def _normalize_url(url: str) -> str:
    """Lower-case scheme and host so equal endpoints compare equal."""
    url = url.strip()
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return url
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, parts.fragment))


@dataclass(frozen=True)
class RegistrySource:
    """Identity of a registry endpoint; compares and hashes by URL only."""
    url: str
    name: str | None = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "url", _normalize_url(self.url))

    @classmethod
    def default(cls) -> "RegistrySource":
        return cls(DEFAULT_SOURCE_URL, name="nuget.org")

    def __str__(self) -> str:
        return self.name or self.url


@dataclass(frozen=True)
class CandidateMetadata:
    """Facts about one published version of a package."""
    identifier: str
    version: NuGetVersion
    authors: str = ""
    description: str | None = None
    license: str | None = None
    license_expression: str | None = None
    license_url: str | None = None
    project_url: str | None = None
    listed: bool = True


@dataclass(frozen=True)
class ResolvedPackageMetadata:
    """Selected version metadata joined with owners and the source it came from."""
    identifier: str
    package_version: NuGetVersion
    authors: str
    owners: str
    source: RegistrySource
    description: str | None = None
    license: str | None = None
    license_expression: str | None = None
    license_url: str | None = None
    project_url: str | None = None
    listed: bool = True

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateMetadata,
        owners: str,
        source: RegistrySource,
    ) -> "ResolvedPackageMetadata":
        return cls(
            identifier=candidate.identifier,
            package_version=candidate.version,
            authors=candidate.authors,
            owners=owners,
            source=source,
            description=candidate.description,
            license=candidate.license,
            license_expression=candidate.license_expression,
            license_url=candidate.license_url,
            project_url=candidate.project_url,
            listed=candidate.listed,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly mapping for display."""
        result = {
            "identifier": self.identifier,
            "version": str(self.package_version),
            "authors": self.authors,
            "owners": self.owners,
            "description": self.description,
            "license": self.license,
            "license_expression": self.license_expression,
            "license_url": self.license_url,
            "project_url": self.project_url,
            "source": self.source.url,
        }

        # Remove None values
        return {k: v for k, v in result.items() if v is not None}
