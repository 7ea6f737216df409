"""Shared fixtures wiring the resolver to the in-memory registry."""

from functools import partial

import pytest

from package_metadata.config import ResolverSettings
from package_metadata.models import RegistrySource
from package_metadata.registry import ConnectionCache, SourceRepository
from package_metadata.resolver import PackageMetadataResolver

from .helpers import INDEX_URL, FakeRegistry


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def settings() -> ResolverSettings:
    return ResolverSettings(default_source_url=INDEX_URL, timeout=5.0)


@pytest.fixture
def source() -> RegistrySource:
    return RegistrySource(INDEX_URL, name="test")


@pytest.fixture
def cache(registry, settings) -> ConnectionCache:
    factory = partial(SourceRepository.open, settings=settings, transport=registry.transport)
    return ConnectionCache(factory=factory, settings=settings)


@pytest.fixture
def resolver(cache, settings) -> PackageMetadataResolver:
    return PackageMetadataResolver(cache=cache, settings=settings)
