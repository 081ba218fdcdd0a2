"""
Exception Module

Structured exception hierarchy for fillcache.

Module Structure:
-----------------
- **base.py**: FillCacheError base class + ConfigurationError
- **cache.py**: Cache operation and codec exceptions

Usage:
------
```python
from fillcache.core.exceptions import NoProducerError, CacheIOError
```
"""

from fillcache.core.exceptions.base import ConfigurationError, FillCacheError
from fillcache.core.exceptions.cache import (
    CacheError,
    CacheIOError,
    CodecError,
    NoProducerError,
)

__all__ = [
    # Base
    "FillCacheError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "NoProducerError",
    "CacheIOError",
    "CodecError",
]
