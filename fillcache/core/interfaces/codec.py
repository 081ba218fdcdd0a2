"""
Codec Protocol

Compression is a strategy picked once when a CacheStore is built: either a
real codec (GzipCodec) or IdentityCodec. The store always calls
encode/decode through the codec and never checks a compression flag itself.

Author: System Architect
Date: 2026-10-19
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Codec(Protocol):
    """
    Protocol for the byte transform between produced data and stored bytes.

    Implementations raise CodecError on failure.
    """

    name: str

    async def compress(self, data: bytes) -> bytes:
        """Transform payload bytes into their stored form."""
        ...

    async def decompress(self, data: bytes) -> bytes:
        """Transform stored bytes back into the payload."""
        ...


class IdentityCodec:
    """No-op codec used when compression is disabled."""

    name = "identity"

    async def compress(self, data: bytes) -> bytes:
        return data

    async def decompress(self, data: bytes) -> bytes:
        return data
