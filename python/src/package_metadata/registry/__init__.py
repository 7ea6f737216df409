"""
Registry Access Module

Provides connection management and metadata queries against V3 package registries.

This module handles:
- Opening registry sources and loading their service index
- Reusing one connection per source across resolution requests
- Listing published versions and reading package owners

Components:
- connection: Opened registry source (HTTP client + service index)
- cache: Create-once-per-source connection pool
- fetcher: Registration and search queries
"""

from .cache import ConnectionCache
from .connection import SourceRepository
from .fetcher import MetadataFetcher

__all__ = [
    "ConnectionCache",
    "MetadataFetcher",
    "SourceRepository"
]
