"""In-memory caching of synthesized speech."""

from .manager import AudioCache
from .models import CacheEntry, CacheKey

__all__ = ["AudioCache", "CacheEntry", "CacheKey"]
