"""Read-through caching for directory listings."""

from .keys import CacheKeys
from .read_through import CacheStats, ReadThroughCache

__all__ = ["CacheKeys", "CacheStats", "ReadThroughCache"]
