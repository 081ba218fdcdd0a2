"""
Storage Module

Filesystem backends for cache entries.
"""

from .local_storage import LocalFileStorage

__all__ = [
    "LocalFileStorage",
]
