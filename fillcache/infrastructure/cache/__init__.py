"""
Cache Module

Content-addressed disk cache with fill-on-miss.
"""

from .cache_store import (
    CacheObserver,
    CacheStore,
    close_cache_store,
    create_cache_store,
    get_cache_store,
)
from .key_mapper import KeyMapper

__all__ = [
    "CacheObserver",
    "CacheStore",
    "KeyMapper",
    "create_cache_store",
    "get_cache_store",
    "close_cache_store",
]
