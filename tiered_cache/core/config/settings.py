#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
tiered read-through cache. All tunables live here so the orchestrator, the
storage adapters and the network monitor read the same values.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with reload_settings()
"""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tiered_cache.core.config.constants import (
    CACHE_KEY_PREFIX,
    CACHE_METRICS_KEY,
    DEFAULT_CACHE_TTL,
    EVICTION_FRACTION,
    EVICTION_PROBABILITY,
    EVICTION_READ_CONCURRENCY,
    FETCH_MAX_ATTEMPTS,
    FETCH_RETRY_BASE_DELAY,
    MAX_CACHE_ITEMS,
    MEMORY_CACHE_MAX_ITEMS,
    METRICS_RESET_INTERVAL_HOURS,
    NETWORK_CHECK_TIMEOUT,
    NETWORK_PROBE_TIMEOUT,
    NETWORK_PROBE_URL,
    SLOW_QUERY_THRESHOLD_MS,
)


class CacheSettings(BaseSettings):
    """
    Cache tier configuration.

    Both caps use the same oldest-first batch eviction: when the item count
    exceeds the cap, the oldest CACHE_EVICTION_FRACTION of entries is dropped.
    """

    CACHE_KEY_PREFIX: str = Field(default=CACHE_KEY_PREFIX, description="Namespace prefix for cache keys")
    CACHE_DEFAULT_TTL: float = Field(default=DEFAULT_CACHE_TTL, description="Default freshness window (seconds)")
    CACHE_MAX_ITEMS: int = Field(default=MAX_CACHE_ITEMS, description="Durable store item cap")
    CACHE_MEMORY_MAX_ITEMS: int = Field(default=MEMORY_CACHE_MAX_ITEMS, description="Fast store item cap")
    CACHE_EVICTION_PROBABILITY: float = Field(default=EVICTION_PROBABILITY, description="Chance a size check runs")
    CACHE_EVICTION_FRACTION: float = Field(default=EVICTION_FRACTION, description="Share of entries evicted")
    CACHE_EVICTION_READ_CONCURRENCY: int = Field(
        default=EVICTION_READ_CONCURRENCY, description="Durable reads in flight during a size check"
    )
    CACHE_METRICS_KEY: str = Field(default=CACHE_METRICS_KEY, description="Durable key of the metrics record")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class RetrySettings(BaseSettings):
    """Remote fetch retry configuration (exponential backoff)."""

    FETCH_MAX_ATTEMPTS: int = Field(default=FETCH_MAX_ATTEMPTS, description="Total fetch attempts")
    FETCH_RETRY_BASE_DELAY: float = Field(default=FETCH_RETRY_BASE_DELAY, description="First backoff (seconds)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class NetworkSettings(BaseSettings):
    """
    Network reachability configuration.

    NETWORK_CHECK_TIMEOUT bounds the whole check; the probe's own HTTP
    timeout may be longer since expiry of the outer budget wins.
    """

    NETWORK_CHECK_TIMEOUT: float = Field(default=NETWORK_CHECK_TIMEOUT, description="Reachability budget (seconds)")
    NETWORK_PROBE_URL: str = Field(default=NETWORK_PROBE_URL, description="URL probed for connectivity")
    NETWORK_PROBE_TIMEOUT: float = Field(default=NETWORK_PROBE_TIMEOUT, description="HTTP probe timeout (seconds)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class MonitoringSettings(BaseSettings):
    """Metrics configuration."""

    SLOW_QUERY_THRESHOLD_MS: float = Field(default=SLOW_QUERY_THRESHOLD_MS, description="Slow read warning threshold")
    METRICS_RESET_INTERVAL_HOURS: float = Field(
        default=METRICS_RESET_INTERVAL_HOURS, description="Cadence of scheduled metrics resets"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class RedisSettings(BaseSettings):
    """Redis configuration for the durable medium."""

    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum total connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """Logging configuration for structured logging."""

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """General application settings."""

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="tiered-cache", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from tiered_cache.core.config.settings import get_settings

        settings = get_settings()
        ttl = settings.cache.CACHE_DEFAULT_TTL
        budget = settings.network.NETWORK_CHECK_TIMEOUT
    """

    # Cache settings
    CACHE_KEY_PREFIX: str = Field(default=CACHE_KEY_PREFIX, description="Namespace prefix for cache keys")
    CACHE_DEFAULT_TTL: float = Field(default=DEFAULT_CACHE_TTL, description="Default freshness window (seconds)")
    CACHE_MAX_ITEMS: int = Field(default=MAX_CACHE_ITEMS, description="Durable store item cap")
    CACHE_MEMORY_MAX_ITEMS: int = Field(default=MEMORY_CACHE_MAX_ITEMS, description="Fast store item cap")
    CACHE_EVICTION_PROBABILITY: float = Field(default=EVICTION_PROBABILITY, description="Chance a size check runs")
    CACHE_EVICTION_FRACTION: float = Field(default=EVICTION_FRACTION, description="Share of entries evicted")
    CACHE_EVICTION_READ_CONCURRENCY: int = Field(
        default=EVICTION_READ_CONCURRENCY, description="Durable reads in flight during a size check"
    )
    CACHE_METRICS_KEY: str = Field(default=CACHE_METRICS_KEY, description="Durable key of the metrics record")

    # Retry settings
    FETCH_MAX_ATTEMPTS: int = Field(default=FETCH_MAX_ATTEMPTS, description="Total fetch attempts")
    FETCH_RETRY_BASE_DELAY: float = Field(default=FETCH_RETRY_BASE_DELAY, description="First backoff (seconds)")

    # Network settings
    NETWORK_CHECK_TIMEOUT: float = Field(default=NETWORK_CHECK_TIMEOUT, description="Reachability budget (seconds)")
    NETWORK_PROBE_URL: str = Field(default=NETWORK_PROBE_URL, description="URL probed for connectivity")
    NETWORK_PROBE_TIMEOUT: float = Field(default=NETWORK_PROBE_TIMEOUT, description="HTTP probe timeout (seconds)")

    # Monitoring settings
    SLOW_QUERY_THRESHOLD_MS: float = Field(default=SLOW_QUERY_THRESHOLD_MS, description="Slow read warning threshold")
    METRICS_RESET_INTERVAL_HOURS: float = Field(
        default=METRICS_RESET_INTERVAL_HOURS, description="Cadence of scheduled metrics resets"
    )

    # Redis settings
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum total connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="tiered-cache", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @model_validator(mode="after")
    def validate_ratios(self):
        """Check ratio ranges and cross-field limits."""
        for name in ("CACHE_EVICTION_PROBABILITY", "CACHE_EVICTION_FRACTION"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0.0 and 1.0")
        if self.FETCH_MAX_ATTEMPTS < 1:
            raise ValueError("FETCH_MAX_ATTEMPTS must be at least 1")
        if not 1 <= self.CACHE_EVICTION_READ_CONCURRENCY < self.REDIS_MAX_CONNECTIONS:
            raise ValueError("CACHE_EVICTION_READ_CONCURRENCY must be at least 1 and below REDIS_MAX_CONNECTIONS")
        return self

    # Nested configuration views
    @property
    def cache(self) -> CacheSettings:
        """Get cache settings."""
        return CacheSettings(
            CACHE_KEY_PREFIX=self.CACHE_KEY_PREFIX,
            CACHE_DEFAULT_TTL=self.CACHE_DEFAULT_TTL,
            CACHE_MAX_ITEMS=self.CACHE_MAX_ITEMS,
            CACHE_MEMORY_MAX_ITEMS=self.CACHE_MEMORY_MAX_ITEMS,
            CACHE_EVICTION_PROBABILITY=self.CACHE_EVICTION_PROBABILITY,
            CACHE_EVICTION_FRACTION=self.CACHE_EVICTION_FRACTION,
            CACHE_EVICTION_READ_CONCURRENCY=self.CACHE_EVICTION_READ_CONCURRENCY,
            CACHE_METRICS_KEY=self.CACHE_METRICS_KEY,
        )

    @property
    def retry(self) -> RetrySettings:
        """Get fetch retry settings."""
        return RetrySettings(
            FETCH_MAX_ATTEMPTS=self.FETCH_MAX_ATTEMPTS,
            FETCH_RETRY_BASE_DELAY=self.FETCH_RETRY_BASE_DELAY,
        )

    @property
    def network(self) -> NetworkSettings:
        """Get network reachability settings."""
        return NetworkSettings(
            NETWORK_CHECK_TIMEOUT=self.NETWORK_CHECK_TIMEOUT,
            NETWORK_PROBE_URL=self.NETWORK_PROBE_URL,
            NETWORK_PROBE_TIMEOUT=self.NETWORK_PROBE_TIMEOUT,
        )

    @property
    def monitoring(self) -> MonitoringSettings:
        """Get monitoring settings."""
        return MonitoringSettings(
            SLOW_QUERY_THRESHOLD_MS=self.SLOW_QUERY_THRESHOLD_MS,
            METRICS_RESET_INTERVAL_HOURS=self.METRICS_RESET_INTERVAL_HOURS,
        )

    @property
    def redis(self) -> RedisSettings:
        """Get Redis settings."""
        return RedisSettings(
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
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
