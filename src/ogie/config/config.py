"""
Configuration management for ogie using Pydantic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ogie.protocols import (
    DEFAULT_BULK_CONCURRENCY,
    DEFAULT_BULK_CONCURRENCY_PER_DOMAIN,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_MIN_DELAY_PER_DOMAIN_MS,
    DEFAULT_REQUESTS_PER_MINUTE,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_USER_AGENT,
    BulkOptions,
    BulkProgress,
    ExtractOptions,
)

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class FetchConfig(BaseModel):
    """Secure fetcher configuration."""

    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, description="Per-attempt HTTP timeout in milliseconds.")
    max_redirects: int = Field(default=DEFAULT_MAX_REDIRECTS, description="Maximum redirect hops to follow.")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent string for HTTP requests.")
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra request headers.")
    allow_private_urls: bool = Field(default=False, description="Allow loopback and private network targets.")
    convert_charset: bool = Field(default=False, description="Detect and convert non UTF-8 documents.")
    fetch_oembed: bool = Field(default=False, description="Fetch the discovered oEmbed JSON endpoint.")
    only_open_graph: bool = Field(default=False, description="Skip every parser except OpenGraph.")

    @field_validator("timeout_ms")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeout_ms must be positive")
        return v

    @field_validator("max_redirects")
    @classmethod
    def validate_max_redirects(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_redirects must not be negative")
        return v


class CacheConfig(BaseModel):
    """Result cache configuration."""

    enabled: bool = True
    max_size: int = Field(default=100, description="Maximum number of cached documents.")
    ttl_ms: int = Field(default=300_000, description="Entry lifetime in milliseconds.")

    @field_validator("max_size", "ttl_ms")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("cache limits must be positive")
        return v


class BulkConfig(BaseModel):
    """Bulk scheduler configuration."""

    concurrency: int = Field(default=DEFAULT_BULK_CONCURRENCY, description="Global in-flight extractions.")
    concurrency_per_domain: int = Field(
        default=DEFAULT_BULK_CONCURRENCY_PER_DOMAIN, description="In-flight extractions per registrable domain."
    )
    requests_per_minute: int = Field(
        default=DEFAULT_REQUESTS_PER_MINUTE, description="Extraction starts per rolling 60 second window."
    )
    min_delay_per_domain_ms: int = Field(
        default=DEFAULT_MIN_DELAY_PER_DOMAIN_MS, description="Minimum spacing between starts to one domain."
    )
    continue_on_error: bool = True

    @field_validator("concurrency", "concurrency_per_domain", "requests_per_minute")
    @classmethod
    def validate_limits(cls, v: int) -> int:
        if v < 1:
            raise ValueError("bulk limits must be at least 1")
        return v

    @field_validator("min_delay_per_domain_ms")
    @classmethod
    def validate_delay(cls, v: int) -> int:
        if v < 0:
            raise ValueError("min_delay_per_domain_ms must not be negative")
        return v


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "ogie"
    version: str = "0.1.0"
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    bulk: BulkConfig = Field(default_factory=BulkConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="OGIE_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)

    def create_cache(self, on_eviction: Optional[Callable[[str, Any], None]] = None) -> Any:
        """Build a result cache from the cache section, or ``None`` when disabled."""
        if not self.cache.enabled:
            return None
        from ogie.cache.metadata_cache import create_cache

        return create_cache(max_size=self.cache.max_size, ttl=self.cache.ttl_ms, on_eviction=on_eviction)

    def extract_options(self, cache: Any = None) -> ExtractOptions:
        return ExtractOptions(
            timeout=self.fetch.timeout_ms,
            max_redirects=self.fetch.max_redirects,
            user_agent=self.fetch.user_agent,
            headers=dict(self.fetch.headers),
            allow_private_urls=self.fetch.allow_private_urls,
            convert_charset=self.fetch.convert_charset,
            fetch_oembed=self.fetch.fetch_oembed,
            only_open_graph=self.fetch.only_open_graph,
            cache=cache,
        )

    def bulk_options(
        self, cache: Any = None, on_progress: Optional[Callable[[BulkProgress], Any]] = None
    ) -> BulkOptions:
        return BulkOptions(
            concurrency=self.bulk.concurrency,
            concurrency_per_domain=self.bulk.concurrency_per_domain,
            requests_per_minute=self.bulk.requests_per_minute,
            min_delay_per_domain=self.bulk.min_delay_per_domain_ms,
            continue_on_error=self.bulk.continue_on_error,
            on_progress=on_progress,
            extract_options=self.extract_options(cache=cache),
        )


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    paths_to_check = [
        current_dir / "ogie.yaml",
        current_dir / "ogie.yml",
        current_dir / "config.yaml",
        current_dir / "config.yml",
    ]
    for path in paths_to_check:
        if path.exists():
            return path
    return None


def load_config() -> Config:
    """Load configuration from the first config file found, or from defaults and environment."""
    config_path = find_config_file()
    if config_path:
        log.info("Loading configuration from: %s", config_path)
        return Config.from_yaml(config_path)
    log.info("No config file found. Using default settings.")
    return Config()
