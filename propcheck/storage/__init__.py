"""Caching for the orchestration layer."""

from propcheck.storage.cache import CacheStore, MemoryCache

__all__ = ["CacheStore", "MemoryCache"]
