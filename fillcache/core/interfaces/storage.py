"""
Storage Backend Protocol

This module defines the protocol for the I/O service CacheStore writes entries
through, enabling dependency injection and testability.

Architectural Decision: Protocol-based abstraction
- Production uses LocalFileStorage (real filesystem, worker threads)
- Tests inject InMemoryStorage or failure-injecting doubles
- Failures use the native OSError hierarchy so "not found" is
  FileNotFoundError everywhere

Author: System Architect
Date: 2026-10-19
"""

import errno
import os
from typing import Protocol, runtime_checkable


@runtime_checkable
class StorageBackend(Protocol):
    """
    Protocol defining the filesystem primitives CacheStore relies on.

    Every method is a coroutine. Implementations raise FileNotFoundError when
    the path does not exist and another OSError subclass for any other
    failure; they never translate errors into cache exceptions themselves.
    """

    async def read_bytes(self, path: str) -> bytes:
        """
        Read the full contents of a file.

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: For any other failure
        """
        ...

    async def write_bytes(self, path: str, data: bytes) -> None:
        """
        Create or fully replace a file with data.

        The parent directory must already exist.

        Raises:
            OSError: On failure
        """
        ...

    async def stat(self, path: str) -> int:
        """
        Return the size in bytes of an existing file.

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: For any other failure
        """
        ...

    async def unlink(self, path: str) -> None:
        """
        Remove a file.

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: For any other failure
        """
        ...

    async def makedirs(self, path: str) -> None:
        """
        Create a directory and its parents. Succeeds if it already exists.

        Raises:
            OSError: On failure
        """
        ...


def _not_found(path: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)


class InMemoryStorage:
    """
    Simple in-memory storage backend for testing.

    Implements the StorageBackend protocol without touching the disk.
    Mirrors filesystem semantics closely enough to exercise CacheStore:
    writes into a directory that was never created fail with
    FileNotFoundError, exactly like open(..., "wb") would.

    Note: Use only for testing purposes.
    """

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.directories: set[str] = set()

    async def read_bytes(self, path: str) -> bytes:
        if path not in self.files:
            raise _not_found(path)
        return self.files[path]

    async def write_bytes(self, path: str, data: bytes) -> None:
        parent = os.path.dirname(path)
        if parent and parent not in self.directories:
            raise _not_found(path)
        self.files[path] = bytes(data)

    async def stat(self, path: str) -> int:
        if path not in self.files:
            raise _not_found(path)
        return len(self.files[path])

    async def unlink(self, path: str) -> None:
        if path not in self.files:
            raise _not_found(path)
        del self.files[path]

    async def makedirs(self, path: str) -> None:
        while path and path not in self.directories:
            self.directories.add(path)
            path = os.path.dirname(path)
