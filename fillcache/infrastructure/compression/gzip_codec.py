"""
Gzip codec for transparent entry compression.

gzip.compress/decompress are CPU-bound and release the GIL inside zlib, so
they run in worker threads like the filesystem calls.
"""

import asyncio
import gzip
import zlib

from fillcache.core.config.constants import (
    DEFAULT_COMPRESSION_LEVEL,
    MAX_COMPRESSION_LEVEL,
    MIN_COMPRESSION_LEVEL,
)
from fillcache.core.exceptions import CodecError, ConfigurationError

# Everything gzip/zlib raise for malformed or truncated input
_CODEC_FAILURES = (gzip.BadGzipFile, zlib.error, EOFError, OSError)


class GzipCodec:
    """
    Codec compressing stored entries with gzip.

    Decompressing data that was not written by a compressing store (or was
    truncated on disk) raises CodecError rather than returning garbage.
    """

    name = "gzip"

    def __init__(self, level: int = DEFAULT_COMPRESSION_LEVEL):
        if not MIN_COMPRESSION_LEVEL <= level <= MAX_COMPRESSION_LEVEL:
            raise ConfigurationError(
                f"Compression level must be between {MIN_COMPRESSION_LEVEL} "
                f"and {MAX_COMPRESSION_LEVEL}",
                details={"level": level},
            )
        self._level = level

    @property
    def level(self) -> int:
        return self._level

    async def compress(self, data: bytes) -> bytes:
        try:
            # mtime=0 keeps the output deterministic for identical payloads
            return await asyncio.to_thread(gzip.compress, data, self._level, mtime=0)
        except _CODEC_FAILURES as e:
            raise CodecError.from_exception(e, message=f"Compression failed: {e}", operation="compress")

    async def decompress(self, data: bytes) -> bytes:
        try:
            return await asyncio.to_thread(gzip.decompress, data)
        except _CODEC_FAILURES as e:
            raise CodecError.from_exception(
                e, message=f"Decompression failed: {e}", operation="decompress"
            )
