"""Tests for settings and logging configuration."""

import logging

import pytest
import structlog
from pydantic import ValidationError

from package_metadata.config import DEFAULT_SOURCE_URL, ResolverSettings, configure_logging


class TestResolverSettings:
    def test_defaults(self):
        settings = ResolverSettings()

        assert settings.default_source_url == DEFAULT_SOURCE_URL
        assert settings.timeout == 30.0
        assert settings.semver_level == "2.0.0"

    @pytest.mark.parametrize("field, value", [("timeout", 0), ("timeout", -1.5), ("default_source_url", "ftp://feed")])
    def test_rejects_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            ResolverSettings(**{field: value})

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PACKAGE_METADATA_SOURCE_URL", " https://feed.example/v3/index.json ")
        monkeypatch.setenv("PACKAGE_METADATA_TIMEOUT", "12.5")
        monkeypatch.setenv("PACKAGE_METADATA_USER_AGENT", "details-command/2.0")

        settings = ResolverSettings.from_env()

        assert settings.default_source_url == "https://feed.example/v3/index.json"
        assert settings.timeout == 12.5
        assert settings.user_agent == "details-command/2.0"

    def test_from_env_without_overrides(self, monkeypatch):
        for name in ("PACKAGE_METADATA_SOURCE_URL", "PACKAGE_METADATA_TIMEOUT", "PACKAGE_METADATA_USER_AGENT"):
            monkeypatch.delenv(name, raising=False)

        assert ResolverSettings.from_env() == ResolverSettings()


def test_configure_logging_sets_level(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)

    try:
        configure_logging("debug")

        assert root.level == logging.DEBUG
        assert root.handlers
    finally:
        structlog.reset_defaults()
