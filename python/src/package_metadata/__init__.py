"""
Package Metadata Resolution

Resolves metadata about a package published on a V3 package registry.

This module supports:
- Exact and floating (latest) version selection
- Connection reuse across resolution requests
- Package owners lookup through the registry search service
- Concurrent resolution of several packages

Components:
- resolver: Result assembly (main entry point)
- versioning: Version type and selection policy
- registry: Connection cache and registry queries
- models: Data models
"""

from .config import ResolverSettings, configure_logging
from .exceptions import ConnectionFailedError, FetchError, InvalidRequestError, PackageMetadataError
from .models import CandidateMetadata, RegistrySource, ResolvedPackageMetadata
from .resolver import PackageMetadataResolver, get_metadata_resolver
from .versioning import FloatBehavior, NuGetVersion, select_version

__version__ = "1.0.0"

__all__ = [
    "CandidateMetadata",
    "ConnectionFailedError",
    "FetchError",
    "FloatBehavior",
    "InvalidRequestError",
    "NuGetVersion",
    "PackageMetadataError",
    "PackageMetadataResolver",
    "RegistrySource",
    "ResolvedPackageMetadata",
    "ResolverSettings",
    "configure_logging",
    "get_metadata_resolver",
    "select_version"
]
