"""
Package Metadata Configuration

This module holds the resolver settings model and the shared structured logger.
"""

import logging
import os

import structlog
from pydantic import BaseModel, Field, validator

DEFAULT_SOURCE_URL = "https://api.nuget.org/v3/index.json"

# Create package metadata logger
metadata_logger = structlog.get_logger("package_metadata")


def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and route structlog through it."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


class ResolverSettings(BaseModel):
    """Settings for registry connections and metadata resolution."""

    default_source_url: str = Field(default=DEFAULT_SOURCE_URL, description="Registry used when the caller supplies none")
    timeout: float = Field(default=30.0, description="Transport timeout in seconds")
    user_agent: str = Field(default="package-metadata/1.0.0", description="User-Agent header sent to the registry")
    semver_level: str = Field(default="2.0.0", description="semVerLevel passed to the search service")

    @validator('default_source_url')
    def validate_source_url(cls, v):
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("default_source_url must be an http(s) URL")
        return v

    @validator('timeout')
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @classmethod
    def from_env(cls) -> "ResolverSettings":
        """Build settings, letting environment variables override the defaults."""
        overrides = {}

        source_url = os.getenv("PACKAGE_METADATA_SOURCE_URL")
        if source_url:
            overrides["default_source_url"] = source_url

        timeout = os.getenv("PACKAGE_METADATA_TIMEOUT")
        if timeout:
            overrides["timeout"] = float(timeout)

        user_agent = os.getenv("PACKAGE_METADATA_USER_AGENT")
        if user_agent:
            overrides["user_agent"] = user_agent

        return cls(**overrides)
