"""
Key to storage location mapping.

    <root>/<hex[0]>/<full hex digest>

The leading hex character shards entries over at most 16 subdirectories.
"""

import hashlib
import os

from fillcache.core.config.constants import (
    DEFAULT_DIGEST_ALGORITHM,
    SHARD_PREFIX_LENGTH,
    SUPPORTED_DIGEST_ALGORITHMS,
)
from fillcache.core.exceptions import ConfigurationError

CacheKey = str | bytes | bytearray | memoryview


def key_bytes(key: CacheKey) -> bytes:
    """Raw bytes hashed for a key; str keys are hashed as UTF-8."""
    if isinstance(key, str):
        return key.encode("utf-8")
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    raise TypeError(f"Cache key must be str or bytes-like, got {type(key).__name__}")


class KeyMapper:
    """
    Deterministically converts cache keys into entry paths.

    Root and digest algorithm are fixed at construction, so a key maps to the
    same location for the lifetime of the mapper. Digest collisions between
    distinct keys are accepted, not detected.
    """

    def __init__(self, root: str, digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM):
        algorithm = digest_algorithm.lower()
        if algorithm not in SUPPORTED_DIGEST_ALGORITHMS:
            raise ConfigurationError(
                f"Unsupported digest algorithm: {digest_algorithm}",
                details={"supported": sorted(SUPPORTED_DIGEST_ALGORITHMS)},
            ).with_suggestion("Use sha1 or a stronger fixed-length hashlib algorithm")
        self._root = os.fspath(root)
        self._algorithm = algorithm

    @property
    def root(self) -> str:
        return self._root

    @property
    def digest_algorithm(self) -> str:
        return self._algorithm

    def digest(self, key: CacheKey) -> str:
        """Lowercase hex digest of the key."""
        return hashlib.new(self._algorithm, key_bytes(key)).hexdigest()

    def locate(self, key: CacheKey) -> str:
        """Full path of the entry file for key."""
        digest = self.digest(key)
        return os.path.join(self._root, digest[:SHARD_PREFIX_LENGTH], digest)

    def shard_of(self, key: CacheKey) -> str:
        """Shard directory holding the entry for key."""
        return os.path.dirname(self.locate(key))
