"""
Local filesystem storage backend.

Blocking os/pathlib calls run in the default thread pool through
asyncio.to_thread so concurrent cache operations never stall the event loop.
Entries are written to a private temp file in the same directory and renamed
into place, so readers only ever see a complete old or new entry.
"""

import asyncio
import os
import tempfile
from pathlib import Path


def _write_atomic(path: str, data: bytes) -> None:
    # Unique temp name per write; concurrent writers never share one
    fd, tmp_path = tempfile.mkstemp(
        dir=os.path.dirname(path) or ".", prefix=".", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        raise


class LocalFileStorage:
    """StorageBackend implementation over the local filesystem."""

    async def read_bytes(self, path: str) -> bytes:
        return await asyncio.to_thread(Path(path).read_bytes)

    async def write_bytes(self, path: str, data: bytes) -> None:
        await asyncio.to_thread(_write_atomic, path, data)

    async def stat(self, path: str) -> int:
        result = await asyncio.to_thread(os.stat, path)
        return result.st_size

    async def unlink(self, path: str) -> None:
        await asyncio.to_thread(os.unlink, path)

    async def makedirs(self, path: str) -> None:
        # exist_ok makes concurrent creation of the same shard safe
        await asyncio.to_thread(os.makedirs, path, exist_ok=True)
