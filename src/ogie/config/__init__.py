"""Configuration models for ogie."""

from .config import BulkConfig, CacheConfig, Config, FetchConfig, MonitoringConfig, find_config_file, load_config

__all__ = [
    "BulkConfig",
    "CacheConfig",
    "Config",
    "FetchConfig",
    "MonitoringConfig",
    "find_config_file",
    "load_config",
]
