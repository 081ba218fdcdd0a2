"""
Configuration Module

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Stage identifiers, storage layout and codec constants

Usage:
------
```python
from fillcache.core.config import get_settings
from fillcache.core.config.constants import Stage

settings = get_settings()
compress = settings.cache.CACHE_COMPRESS
```
"""

from .settings import CacheSettings, LoggingSettings, Settings, get_settings, reload_settings

__all__ = [
    "CacheSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
    "reload_settings",
]
