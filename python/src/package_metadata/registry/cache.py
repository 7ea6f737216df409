"""
Registry Connection Cache

This module keeps one opened connection per registry source and reuses it for
every resolution request that targets the same source.
"""

import asyncio
from collections.abc import Awaitable, Callable
from functools import partial

from ..config import ResolverSettings, metadata_logger
from ..exceptions import ConnectionFailedError
from ..models import RegistrySource
from .connection import SourceRepository

ConnectionFactory = Callable[[RegistrySource], Awaitable[SourceRepository]]


class ConnectionCache:
    """Create-once-per-source pool of registry connections."""

    def __init__(self, factory: ConnectionFactory | None = None, settings: ResolverSettings | None = None):
        """
        Initialize the connection cache.

        Args:
            factory: Coroutine function that opens a connection for a source
                (defaults to SourceRepository.open)
            settings: Settings passed to the default factory
        """
        self.settings = settings if settings is not None else ResolverSettings()
        self._factory = factory or partial(SourceRepository.open, settings=self.settings)
        self._connections: dict[RegistrySource, SourceRepository] = {}
        self._locks: dict[RegistrySource, asyncio.Lock] = {}
        # Bumped by aclose(); creations started before a teardown are never stored
        self._generation = 0

    async def get_connection(self, source: RegistrySource) -> SourceRepository:
        """
        Get the connection for a source, opening it on first use.

        Concurrent callers for the same unseen source wait on a per-source lock,
        so the factory runs once and every caller receives the same connection.
        A failed or cancelled creation stores nothing and the next call retries.

        Raises:
            ConnectionFailedError: The connection could not be opened, or the
                cache was closed while it was being opened
        """
        connection = self._connections.get(source)
        if connection is not None:
            return connection

        generation = self._generation
        lock = self._locks.setdefault(source, asyncio.Lock())
        async with lock:
            connection = self._connections.get(source)
            if connection is None:
                metadata_logger.debug(f"Opening registry connection for {source.url}")
                connection = await self._factory(source)

                if generation != self._generation:
                    await connection.aclose()
                    raise ConnectionFailedError(
                        f"Connection cache was closed while opening {source.url}", source_url=source.url
                    )
                self._connections[source] = connection

        return connection

    def __contains__(self, source: RegistrySource) -> bool:
        return source in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    async def aclose(self):
        """Close every cached connection and empty the cache."""
        connections = list(self._connections.values())
        self._connections.clear()
        self._locks.clear()
        self._generation += 1

        for connection in connections:
            try:
                await connection.aclose()
            except Exception as e:
                metadata_logger.warning(f"Error closing registry connection {connection.source.url}: {e}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
