"""
Core Interfaces

Protocols for the services injected into CacheStore.
"""

from fillcache.core.interfaces.codec import Codec, IdentityCodec
from fillcache.core.interfaces.storage import InMemoryStorage, StorageBackend

__all__ = [
    "Codec",
    "IdentityCodec",
    "InMemoryStorage",
    "StorageBackend",
]
