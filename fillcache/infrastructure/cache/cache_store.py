#!/usr/bin/env python3
"""
Content-Addressed Disk Cache Store

Architecture:
    CacheStore (Public API: get / write / delete / locate)
        ├── KeyMapper (key -> <root>/<hex[0]>/<hex>)
        ├── StorageBackend (LocalFileStorage, injected)
        ├── Codec (GzipCodec or IdentityCodec, chosen once at construction)
        └── CacheObserver (structured logs, diagnostic sink, counters)

Fill-on-miss:
    get(key, producer) reads the entry. On FileNotFoundError the producer runs
    exactly once, its result is returned to the caller, and a detached
    write-back task persists it. The write-back never delays or fails the get;
    its failures surface only through the diagnostic sink and the logs.

Concurrency:
    No locking. Two concurrent misses on the same key both run their producer
    and both write back; the last write to finish wins. Callers that need
    single-flight semantics must deduplicate in front of the store.

Author: System Architect
Date: 2026-10-19
"""

import asyncio
import inspect
import os
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any

from fillcache.core.config.constants import (
    DEFAULT_CACHE_DIRNAME,
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_DIGEST_ALGORITHM,
    LOG_KEY_DIGEST_LENGTH,
    Stage,
)
from fillcache.core.config.settings import Settings, get_settings
from fillcache.core.exceptions import CacheIOError, CodecError, NoProducerError
from fillcache.core.interfaces import Codec, IdentityCodec, StorageBackend
from fillcache.core.logging import get_logger, log_stage
from fillcache.infrastructure.cache.key_mapper import CacheKey, KeyMapper
from fillcache.infrastructure.compression import GzipCodec
from fillcache.infrastructure.storage import LocalFileStorage

logger = get_logger(__name__)

Payload = bytes | bytearray | memoryview | str
Producer = Callable[[], Payload | Awaitable[Payload]]
DebugSink = Callable[[str], None]


def to_bytes(data: Payload) -> bytes:
    """Normalise a payload to bytes; str is stored as UTF-8."""
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode("utf-8")
    raise TypeError(
        f"Cache payload must be bytes, bytearray, memoryview or str, not {type(data).__name__}"
    )


# =============================================================================
# OBSERVABILITY
# =============================================================================


class CacheObserver:
    """
    Tracks cache counters, logs operations and feeds the diagnostic sink.

    The sink is the only shared mutable observation point and can be called
    from any in-flight operation. Exceptions raised by the sink are logged and
    dropped so a faulty sink can never fail a cache operation.
    """

    def __init__(self, debug: DebugSink | None = None, logger_instance=None):
        self._sink = debug
        self._logger = logger_instance or logger

        self._hits = 0
        self._misses = 0
        self._fills = 0
        self._writes = 0
        self._write_errors = 0
        self._deletes = 0

    @property
    def logger(self):
        return self._logger

    def diagnostic(self, message: str) -> None:
        """Send a human-readable message to the diagnostic sink, if any."""
        if self._sink is None:
            return
        try:
            self._sink(message)
        except Exception as e:
            self._logger.warning("Diagnostic sink raised", error=str(e), sink_message=message)

    def stage(self, stage: Stage, message: str, level: str = "debug", **kwargs) -> None:
        log_stage(self._logger, stage, message, level=level, **kwargs)

    def record_hit(self, key_digest: str) -> None:
        self._hits += 1
        self.stage(Stage.HIT_DECOMPRESSING, "Cache hit", key_digest=key_digest)

    def record_miss(self, key_digest: str, has_producer: bool) -> None:
        self._misses += 1
        stage = Stage.MISS_PRODUCING if has_producer else Stage.MISS_NO_PRODUCER
        self.stage(stage, "Cache miss", key_digest=key_digest, has_producer=has_producer)

    def record_fill(self, key_digest: str, size: int) -> None:
        self._fills += 1
        self.stage(
            Stage.WRITING_BACK, "Producer filled entry, writing back", key_digest=key_digest, size=size
        )

    def record_write(self, key_digest: str, size: int) -> None:
        self._writes += 1
        self.stage(Stage.WRITE, "Cache entry written", key_digest=key_digest, size=size)

    def record_write_error(self, key_digest: str, path: str, error: Exception) -> None:
        self._write_errors += 1
        self.diagnostic(f"Cache write error: {error}")
        self.stage(
            Stage.WRITE_ERROR, "Cache write failed", level="warning",
            key_digest=key_digest, path=path, error=str(error),
        )

    def record_delete(self, key_digest: str, existed: bool) -> None:
        if existed:
            self._deletes += 1
        self.stage(Stage.DELETE, "Cache entry deleted", key_digest=key_digest, existed=existed)

    def get_stats(self) -> dict[str, Any]:
        """
        Get cache counters.

        Returns:
            Dict with hits, misses, fills, writes, write_errors, deletes,
            total_requests and hit_rate
        """
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "fills": self._fills,
            "writes": self._writes,
            "write_errors": self._write_errors,
            "deletes": self._deletes,
            "total_requests": total,
            "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
        }


# =============================================================================
# PUBLIC API
# =============================================================================


class CacheStore:
    """
    On-disk cache keyed by the digest of arbitrary keys.

    Usage:
        store = CacheStore("/tmp/c", compress=True, debug=print)

        await store.write("foo", b"bar")
        data = await store.get("foo")                       # b"bar"

        async def render():
            return await expensive_render()

        page = await store.get("page:/index", render)      # runs render once
        await store.delete("page:/index")

        await store.close()                                 # wait for write-backs

    Configuration (root, codec, digest, sink) is fixed at construction.
    An explicit codec overrides the compress flag.
    """

    def __init__(
        self,
        root: str | os.PathLike | None = None,
        *,
        compress: bool = False,
        debug: DebugSink | None = None,
        digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM,
        compression_level: int = DEFAULT_COMPRESSION_LEVEL,
        storage: StorageBackend | None = None,
        codec: Codec | None = None,
    ):
        """
        Initialize the store.

        STAGE-0.0: Store construction

        Args:
            root: Cache root directory (default: <cwd>/cache)
            compress: Gzip entries on disk
            debug: Sink receiving human-readable diagnostic strings
            digest_algorithm: hashlib algorithm for key digests (sha1 or stronger)
            compression_level: Gzip level, used only when compress is set
            storage: I/O backend (default: LocalFileStorage)
            codec: Explicit codec, overriding compress/compression_level

        Raises:
            ConfigurationError: If the digest algorithm or compression level is invalid
        """
        if root is None:
            root = os.path.join(os.getcwd(), DEFAULT_CACHE_DIRNAME)

        self._mapper = KeyMapper(os.fspath(root), digest_algorithm)
        self._storage: StorageBackend = storage if storage is not None else LocalFileStorage()
        if codec is None:
            codec = GzipCodec(compression_level) if compress else IdentityCodec()
        self._codec: Codec = codec
        self._observer = CacheObserver(debug)
        self._pending: set[asyncio.Task] = set()

        log_stage(
            logger, Stage.INITIALIZATION, "Cache store initialized",
            root=self._mapper.root,
            compression=self._codec.name,
            digest_algorithm=self._mapper.digest_algorithm,
        )

    @property
    def root(self) -> str:
        return self._mapper.root

    @property
    def compression(self) -> str:
        return self._codec.name

    @property
    def pending_writes(self) -> int:
        """Number of write-backs still in flight."""
        return len(self._pending)

    def locate(self, key: CacheKey) -> str:
        """Path of the entry file for key."""
        return self._mapper.locate(key)

    def _log_key(self, key: CacheKey) -> str:
        return self._mapper.digest(key)[:LOG_KEY_DIGEST_LENGTH]

    # -------------------------------------------------------------------------
    # Core Cache Operations
    # -------------------------------------------------------------------------

    async def get(self, key: CacheKey, producer: Producer | None = None) -> bytes:
        """
        Return the cached bytes for key, filling the entry on a miss.

        STAGE-1.1: Read entry
        STAGE-1.2: Hit, decode
        STAGE-1.3/1.4: Miss without / with producer
        STAGE-1.5: Detached write-back
        STAGE-1.6: Read error

        Args:
            key: Cache key
            producer: Zero-argument callable returning the payload or an
                awaitable of it. Called at most once, only on a miss.

        Returns:
            Cached or freshly produced bytes

        Raises:
            NoProducerError: On a miss when no producer was supplied
            CacheIOError: On read failures other than "not found"
            CodecError: If the stored entry cannot be decompressed
            Exception: Whatever the producer raises, unchanged
        """
        path = self.locate(key)
        key_digest = self._log_key(key)
        self._observer.stage(Stage.READING, "Reading cache entry", key_digest=key_digest)

        try:
            raw = await self._storage.read_bytes(path)
        except FileNotFoundError:
            return await self._fill(key, path, key_digest, producer)
        except OSError as e:
            self._observer.diagnostic(f"Cache read error: {e}")
            self._observer.stage(
                Stage.READ_ERROR, "Cache read failed", level="warning",
                key_digest=key_digest, path=path, error=str(e),
            )
            raise CacheIOError.from_os_error(e, "read", key=key) from e

        self._observer.record_hit(key_digest)
        try:
            return await self._codec.decompress(raw)
        except CodecError as e:
            e.key = key
            e.with_context(path=path)
            self._observer.diagnostic(f"Cache decode error: {e}")
            raise

    async def _fill(
        self, key: CacheKey, path: str, key_digest: str, producer: Producer | None
    ) -> bytes:
        self._observer.record_miss(key_digest, producer is not None)

        if producer is None:
            raise NoProducerError(
                "Cache miss and no producer supplied", key=key, details={"path": path}
            ).with_suggestion("Pass a producer to get() or write() the key first")

        results = producer()
        if inspect.isawaitable(results):
            results = await results
        data = to_bytes(results)

        self._observer.record_fill(key_digest, len(data))
        self._spawn_write_back(key, data)
        return data

    def _spawn_write_back(self, key: CacheKey, data: bytes) -> None:
        # Strong reference until done; the event loop only keeps weak ones.
        task = asyncio.create_task(self._write_back(key, data))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write_back(self, key: CacheKey, data: bytes) -> None:
        """Fire-and-forget persistence of a filled entry (never raises)."""
        try:
            await self.write(key, data)
        except CacheIOError:
            # write() already reported it to the sink and the log
            pass
        except Exception as e:
            self._observer.diagnostic(f"Cache write-back error: {e}")
            self._observer.stage(
                Stage.WRITING_BACK, "Cache write-back failed", level="warning",
                key_digest=self._log_key(key), error=str(e),
            )

    async def write(self, key: CacheKey, data: Payload) -> None:
        """
        Store data under key, fully replacing any previous entry.

        STAGE-2.0: Encode, ensure shard directory, write

        Args:
            key: Cache key
            data: Payload (bytes-like, or str stored as UTF-8)

        Raises:
            CodecError: If compression fails; nothing is written
            CacheIOError: If the shard directory or entry cannot be written
        """
        payload = to_bytes(data)
        path = self.locate(key)
        key_digest = self._log_key(key)

        try:
            stored = await self._codec.compress(payload)
        except CodecError as e:
            e.key = key
            raise

        operation = "makedirs"
        try:
            await self._storage.makedirs(self._mapper.shard_of(key))
            operation = "write"
            await self._storage.write_bytes(path, stored)
        except OSError as e:
            self._observer.record_write_error(key_digest, path, e)
            raise CacheIOError.from_os_error(e, operation, key=key) from e

        self._observer.record_write(key_digest, len(stored))

    async def delete(self, key: CacheKey) -> None:
        """
        Remove the entry for key. Deleting an absent key succeeds.

        STAGE-3.0: Stat, then unlink

        Raises:
            CacheIOError: On stat/unlink failures other than "not found"
        """
        path = self.locate(key)
        key_digest = self._log_key(key)

        operation = "stat"
        try:
            await self._storage.stat(path)
            operation = "unlink"
            await self._storage.unlink(path)
        except FileNotFoundError:
            # Absent before stat, or removed between stat and unlink
            self._observer.record_delete(key_digest, existed=False)
            return
        except OSError as e:
            self._observer.stage(
                Stage.DELETE_ERROR, "Cache delete failed", level="warning",
                key_digest=key_digest, path=path, error=str(e),
            )
            raise CacheIOError.from_os_error(e, operation, key=key) from e

        self._observer.record_delete(key_digest, existed=True)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def drain(self) -> None:
        """Wait until every pending write-back has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        """
        Drain pending write-backs.

        STAGE-0.1: Store shutdown
        """
        await self.drain()
        log_stage(logger, Stage.SHUTDOWN, "Cache store closed", root=self.root)

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    def stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with counters, pending write-backs and configuration
        """
        return {
            **self._observer.get_stats(),
            "pending_writes": self.pending_writes,
            "root": self.root,
            "compression": self.compression,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }

    async def health_check(self) -> dict[str, Any]:
        """
        Check that the cache root exists or can be created.

        Returns:
            Dict with status ('healthy' / 'unhealthy') and stats
        """
        health: dict[str, Any] = {"status": "healthy", "root": self.root}
        try:
            await self._storage.makedirs(self.root)
        except OSError as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)
        health["stats"] = self.stats()
        return health


# =============================================================================
# FACTORY AND GLOBAL INSTANCE
# =============================================================================


def create_cache_store(
    root: str | os.PathLike | None = None,
    compress: bool | None = None,
    debug: DebugSink | None = None,
    storage: StorageBackend | None = None,
    settings: Settings | None = None,
) -> CacheStore:
    """
    Build a CacheStore, taking unset arguments from settings.

    Args:
        root: Cache root (default: CACHE_ROOT, then <cwd>/cache)
        compress: Gzip entries (default: CACHE_COMPRESS)
        debug: Diagnostic sink
        storage: I/O backend (default: LocalFileStorage)
        settings: Settings to read defaults from (default: get_settings())
    """
    cache_settings = (settings or get_settings()).cache

    return CacheStore(
        root if root is not None else cache_settings.CACHE_ROOT,
        compress=cache_settings.CACHE_COMPRESS if compress is None else compress,
        debug=debug,
        digest_algorithm=cache_settings.CACHE_DIGEST_ALGORITHM,
        compression_level=cache_settings.CACHE_COMPRESSION_LEVEL,
        storage=storage,
    )


_cache_store: CacheStore | None = None


def get_cache_store() -> CacheStore:
    """
    Get the global cache store instance (singleton), built from settings.

    Returns:
        CacheStore: Global cache store instance
    """
    global _cache_store

    if _cache_store is None:
        _cache_store = create_cache_store()

    return _cache_store


async def close_cache_store() -> None:
    """Drain and discard the global cache store."""
    global _cache_store

    if _cache_store:
        await _cache_store.close()
        _cache_store = None
