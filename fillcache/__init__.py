"""
fillcache

Content-addressed on-disk cache with fill-on-miss and optional gzip
compression.

Usage:
------
```python
from fillcache import CacheStore

store = CacheStore("/var/cache/app", compress=True)
value = await store.get("report:2026-10", build_report)
```
"""

from fillcache.core.exceptions import (
    CacheError,
    CacheIOError,
    CodecError,
    ConfigurationError,
    FillCacheError,
    NoProducerError,
)
from fillcache.infrastructure.cache import (
    CacheStore,
    KeyMapper,
    close_cache_store,
    create_cache_store,
    get_cache_store,
)

__version__ = "1.0.0"

__all__ = [
    "CacheStore",
    "KeyMapper",
    "create_cache_store",
    "get_cache_store",
    "close_cache_store",
    "FillCacheError",
    "ConfigurationError",
    "CacheError",
    "NoProducerError",
    "CacheIOError",
    "CodecError",
]
