"""
Cache-Related Exceptions

All exceptions raised by cache operations (get, write, delete) and the
compression layer.

Author: System Architect
Date: 2026-10-19
"""

from typing import Any

from fillcache.core.exceptions.base import FillCacheError


class CacheError(FillCacheError):
    """Base exception for cache operation errors."""
    pass


class NoProducerError(CacheError):
    """
    Raised when get() misses and no producer was supplied.

    A caller asking for a possibly-missing value without a way to compute it
    is a programming error; an empty value is never returned instead.
    """
    pass


class CacheIOError(CacheError):
    """
    Raised when a storage operation fails for a reason other than a read miss.

    Common causes:
    - Permission denied on the cache root or shard directory
    - Disk full
    - Path component is not a directory

    details carries errno, strerror, filename and operation.
    """

    @classmethod
    def from_os_error(
        cls, exc: OSError, operation: str, key: str | bytes | None = None
    ) -> "CacheIOError":
        """Wrap an OSError keeping its native code and message."""
        details: dict[str, Any] = {
            "errno": exc.errno,
            "strerror": exc.strerror,
            "filename": exc.filename,
            "operation": operation,
        }
        return cls(f"Cache {operation} failed: {exc}", key=key, details=details)

    @property
    def errno(self) -> int | None:
        return self.details.get("errno")


class CodecError(CacheError):
    """
    Raised when compression or decompression fails.

    Common causes:
    - Entry written without compression read by a store with compression enabled
    - Truncated or corrupted gzip stream
    """
    pass
