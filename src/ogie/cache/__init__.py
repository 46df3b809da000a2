"""In-memory result cache."""

from .metadata_cache import MetadataCache, create_cache, generate_cache_key, normalize_url

__all__ = ["MetadataCache", "create_cache", "generate_cache_key", "normalize_url"]
