#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for fillcache.
Explicit constructor arguments to CacheStore always win; these settings supply
the defaults used by create_cache_store() and get_cache_store().

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms

Author: System Architect
Date: 2026-10-19
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fillcache.core.config.constants import (
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_DIGEST_ALGORITHM,
    MAX_COMPRESSION_LEVEL,
    MIN_COMPRESSION_LEVEL,
    SUPPORTED_DIGEST_ALGORITHMS,
)


def _validate_digest_algorithm(v: str) -> str:
    name = v.lower()
    if name not in SUPPORTED_DIGEST_ALGORITHMS:
        raise ValueError(
            f"CACHE_DIGEST_ALGORITHM must be one of {sorted(SUPPORTED_DIGEST_ALGORITHMS)}"
        )
    return name


def _validate_log_level(v: str) -> str:
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if v.upper() not in valid_levels:
        raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
    return v.upper()


class CacheSettings(BaseSettings):
    """
    Disk cache configuration.

    STAGE-0.1: Store construction defaults

    CACHE_ROOT of None means "<cwd>/cache", resolved when the store is built.
    """

    CACHE_ROOT: str | None = Field(default=None, description="Cache root directory")
    CACHE_COMPRESS: bool = Field(default=False, description="Gzip entries on disk")
    CACHE_DIGEST_ALGORITHM: str = Field(
        default=DEFAULT_DIGEST_ALGORITHM, description="hashlib algorithm used for key digests"
    )
    CACHE_COMPRESSION_LEVEL: int = Field(
        default=DEFAULT_COMPRESSION_LEVEL,
        ge=MIN_COMPRESSION_LEVEL,
        le=MAX_COMPRESSION_LEVEL,
        description="Gzip compression level",
    )

    @field_validator("CACHE_DIGEST_ALGORITHM")
    @classmethod
    def validate_digest_algorithm(cls, v):
        """Validate digest algorithm."""
        return _validate_digest_algorithm(v)

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration

    Architectural Decision: structlog for structured logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        return _validate_log_level(v)

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    STAGE-0: Centralized configuration initialization

    Usage:
        from fillcache.core.config import get_settings

        settings = get_settings()
        root = settings.cache.CACHE_ROOT
        level = settings.logging.LOG_LEVEL
    """

    # Cache settings
    CACHE_ROOT: str | None = Field(default=None, description="Cache root directory")
    CACHE_COMPRESS: bool = Field(default=False, description="Gzip entries on disk")
    CACHE_DIGEST_ALGORITHM: str = Field(
        default=DEFAULT_DIGEST_ALGORITHM, description="hashlib algorithm used for key digests"
    )
    CACHE_COMPRESSION_LEVEL: int = Field(
        default=DEFAULT_COMPRESSION_LEVEL,
        ge=MIN_COMPRESSION_LEVEL,
        le=MAX_COMPRESSION_LEVEL,
        description="Gzip compression level",
    )

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("CACHE_DIGEST_ALGORITHM")
    @classmethod
    def validate_digest_algorithm(cls, v):
        """Validate digest algorithm."""
        return _validate_digest_algorithm(v)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        return _validate_log_level(v)

    # Nested configuration views
    @property
    def cache(self) -> 'CacheSettings':
        """Get cache settings."""
        return CacheSettings(
            CACHE_ROOT=self.CACHE_ROOT,
            CACHE_COMPRESS=self.CACHE_COMPRESS,
            CACHE_DIGEST_ALGORITHM=self.CACHE_DIGEST_ALGORITHM,
            CACHE_COMPRESSION_LEVEL=self.CACHE_COMPRESSION_LEVEL,
        )

    @property
    def logging(self) -> 'LoggingSettings':
        """Get logging settings."""
        return LoggingSettings(
            LOG_LEVEL=self.LOG_LEVEL,
            LOG_FORMAT=self.LOG_FORMAT,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
