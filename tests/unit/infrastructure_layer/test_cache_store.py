"""
Unit Tests for CacheStore

Tests the fill-on-miss protocol, write/delete semantics, compression
transparency and error propagation against in-memory storage.
"""

import asyncio
import errno
import gzip
import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from fillcache.core.exceptions import CacheIOError, CodecError, NoProducerError
from fillcache.core.interfaces import IdentityCodec
from fillcache.infrastructure.cache import CacheStore
from tests.test_fixtures.storage_factory import CountingProducer, FaultyStorage, StorageTestFactory


@pytest.mark.unit
class TestGet:
    """Hit/miss decision and fill-on-miss."""

    @pytest.mark.asyncio
    async def test_hit_returns_stored_bytes(self, store):
        """Test that a written entry is served without a producer."""
        await store.write("foo", b"bar")

        assert await store.get("foo") == b"bar"

    @pytest.mark.asyncio
    async def test_hit_does_not_call_producer(self, store):
        """Test that producers only run on a miss."""
        await store.write("foo", b"bar")
        producer = CountingProducer(b"other")

        assert await store.get("foo", producer) == b"bar"
        assert producer.calls == 0

    @pytest.mark.asyncio
    async def test_miss_without_producer_raises(self, store):
        """Test that a miss with no way to fill is an error, not an empty value."""
        with pytest.raises(NoProducerError) as exc_info:
            await store.get("missing")

        assert exc_info.value.key == "missing"
        assert exc_info.value.details["path"] == store.locate("missing")

    @pytest.mark.asyncio
    async def test_miss_invokes_producer_once_and_persists(self, store, memory_storage):
        """Test the fill path end to end."""
        producer = CountingProducer(b"computed")

        result = await store.get("missing-key", producer)
        await store.drain()

        assert result == b"computed"
        assert producer.calls == 1
        assert memory_storage.files[store.locate("missing-key")] == b"computed"

    @pytest.mark.asyncio
    async def test_filled_value_served_to_later_callers(self, store):
        """Test that a later get without a producer sees the filled entry."""
        await store.get("missing-key", CountingProducer(b"computed"))
        await store.drain()

        assert await store.get("missing-key") == b"computed"

    @pytest.mark.asyncio
    async def test_sync_producer_supported(self, store):
        """Test that a plain function can act as producer."""
        producer = MagicMock(return_value=b"sync")

        assert await store.get("k", producer) == b"sync"
        producer.assert_called_once_with()

    @pytest.mark.asyncio
    async def test_str_producer_result_encoded_as_utf8(self, store, memory_storage):
        """Test that str results are returned and stored as UTF-8 bytes."""
        result = await store.get("k", CountingProducer("héllo"))
        await store.drain()

        assert result == "héllo".encode("utf-8")
        assert memory_storage.files[store.locate("k")] == "héllo".encode("utf-8")

    @pytest.mark.asyncio
    async def test_producer_exception_propagates_without_write(self, store, memory_storage):
        """Test that a failing producer fails the get and writes nothing."""
        producer = AsyncMock(side_effect=RuntimeError("upstream down"))

        with pytest.raises(RuntimeError, match="upstream down"):
            await store.get("k", producer)
        await store.drain()

        assert memory_storage.files == {}
        assert store.pending_writes == 0

    @pytest.mark.asyncio
    async def test_unsupported_producer_result_raises_type_error(self, store):
        """Test that producers must yield bytes-like or str payloads."""
        with pytest.raises(TypeError):
            await store.get("k", AsyncMock(return_value=42))

    @pytest.mark.asyncio
    async def test_read_error_is_not_a_miss(self, debug_messages):
        """Test that a non-ENOENT read failure never triggers the producer."""
        storage = StorageTestFactory.permission_denied("read_bytes")
        store = CacheStore("/cache", storage=storage, debug=debug_messages.append)
        producer = CountingProducer()

        with pytest.raises(CacheIOError) as exc_info:
            await store.get("k", producer)

        assert producer.calls == 0
        assert exc_info.value.errno == errno.EACCES
        assert exc_info.value.details["operation"] == "read"
        assert any("Cache read error" in message for message in debug_messages)


@pytest.mark.unit
class TestWriteBack:
    """Detached write-back after a fill."""

    @pytest.mark.asyncio
    async def test_get_resolves_before_write_back_completes(self):
        """Test that the write-back does not block the get."""
        storage, gate = StorageTestFactory.gated_writes()
        store = CacheStore("/cache", storage=storage)

        result = await store.get("k", CountingProducer(b"v"))

        assert result == b"v"
        assert store.pending_writes == 1
        assert storage.count("write_bytes") == 0

        gate.set()
        await store.drain()

        assert store.pending_writes == 0
        assert storage.files[store.locate("k")] == b"v"

    @pytest.mark.asyncio
    async def test_write_back_failure_only_reaches_sink(self, debug_messages):
        """Test that a failed write-back neither fails the get nor raises later."""
        storage = StorageTestFactory.permission_denied("write_bytes")
        store = CacheStore("/cache", storage=storage, debug=debug_messages.append)

        result = await store.get("k", CountingProducer(b"v"))
        await store.drain()

        assert result == b"v"
        assert len(debug_messages) == 1
        assert debug_messages[0].startswith("Cache write error:")
        assert store.stats()["write_errors"] == 1

    @pytest.mark.asyncio
    async def test_write_back_codec_failure_reaches_sink(self, memory_storage, debug_messages):
        """Test that compression failures during write-back are reported."""
        codec = MagicMock()
        codec.name = "broken"
        codec.compress = AsyncMock(side_effect=CodecError("Compression failed"))
        store = CacheStore(
            "/cache", storage=memory_storage, codec=codec, debug=debug_messages.append
        )

        assert await store.get("k", CountingProducer(b"v")) == b"v"
        await store.drain()

        assert debug_messages == ["Cache write-back error: Compression failed"]
        assert memory_storage.files == {}

    @pytest.mark.asyncio
    async def test_concurrent_misses_both_produce(self, store, memory_storage):
        """Test that concurrent misses on one key are not deduplicated."""
        producer = CountingProducer(b"v", delay=0.01)

        results = await asyncio.gather(store.get("k", producer), store.get("k", producer))
        await store.drain()

        assert results == [b"v", b"v"]
        assert producer.calls == 2
        assert memory_storage.files[store.locate("k")] == b"v"

    @pytest.mark.asyncio
    async def test_close_drains_pending_writes(self):
        """Test that close waits for in-flight write-backs."""
        storage, gate = StorageTestFactory.gated_writes()
        store = CacheStore("/cache", storage=storage)
        await store.get("k", CountingProducer(b"v"))

        closing = asyncio.create_task(store.close())
        await asyncio.sleep(0)
        assert not closing.done()

        gate.set()
        await closing

        assert store.pending_writes == 0
        assert store.locate("k") in storage.files


@pytest.mark.unit
class TestWrite:
    """write() semantics."""

    @pytest.mark.asyncio
    async def test_write_creates_shard_directory(self, store, memory_storage):
        """Test that the shard directory is ensured before writing."""
        await store.write("foo", b"bar")

        assert os.path.dirname(store.locate("foo")) in memory_storage.directories

    @pytest.mark.asyncio
    async def test_write_ensures_mapper_shard(self):
        """Test that makedirs targets the key's shard before the entry is written."""
        storage = FaultyStorage()
        store = CacheStore("/cache", storage=storage)

        await store.write("foo", b"bar")

        assert storage.calls == [
            ("makedirs", "/cache/0"),
            ("write_bytes", store.locate("foo")),
        ]

    @pytest.mark.asyncio
    async def test_write_replaces_entry(self, store):
        """Test that later writes fully overwrite earlier ones."""
        await store.write("foo", b"a long first value")
        await store.write("foo", b"short")

        assert await store.get("foo") == b"short"

    @pytest.mark.asyncio
    async def test_write_accepts_str_and_bytearray(self, store):
        """Test payload normalisation."""
        await store.write("s", "bar")
        await store.write("b", bytearray(b"baz"))

        assert await store.get("s") == b"bar"
        assert await store.get("b") == b"baz"

    @pytest.mark.asyncio
    async def test_write_io_failure_raises_and_reports(self, debug_messages):
        """Test that I/O failures reach both the caller and the sink."""
        storage = StorageTestFactory.permission_denied("write_bytes")
        store = CacheStore("/cache", storage=storage, debug=debug_messages.append)

        with pytest.raises(CacheIOError) as exc_info:
            await store.write("foo", b"bar")

        assert exc_info.value.errno == errno.EACCES
        assert exc_info.value.details["operation"] == "write"
        assert debug_messages and "Permission denied" in debug_messages[0]

    @pytest.mark.asyncio
    async def test_makedirs_failure_raises(self):
        """Test that shard creation failures are write failures."""
        storage = StorageTestFactory.permission_denied("makedirs")
        store = CacheStore("/cache", storage=storage)

        with pytest.raises(CacheIOError) as exc_info:
            await store.write("foo", b"bar")

        assert exc_info.value.details["operation"] == "makedirs"
        assert storage.count("write_bytes") == 0

    @pytest.mark.asyncio
    async def test_compression_failure_skips_write(self, memory_storage):
        """Test that no uncompressed fallback is written."""
        codec = MagicMock()
        codec.name = "broken"
        codec.compress = AsyncMock(side_effect=CodecError("Compression failed"))
        store = CacheStore("/cache", storage=memory_storage, codec=codec)

        with pytest.raises(CodecError) as exc_info:
            await store.write("foo", b"bar")

        assert exc_info.value.key == "foo"
        assert memory_storage.files == {}

    @pytest.mark.asyncio
    async def test_faulty_sink_does_not_mask_error(self):
        """Test that an exception from the sink is contained."""
        storage = StorageTestFactory.permission_denied("write_bytes")
        sink = MagicMock(side_effect=RuntimeError("sink broke"))
        store = CacheStore("/cache", storage=storage, debug=sink)

        with pytest.raises(CacheIOError):
            await store.write("foo", b"bar")

        sink.assert_called_once()


@pytest.mark.unit
class TestDelete:
    """delete() semantics."""

    @pytest.mark.asyncio
    async def test_delete_missing_key_succeeds(self, store):
        """Test idempotent delete."""
        await store.delete("never-written")

    @pytest.mark.asyncio
    async def test_delete_removes_entry(self, store):
        """Test that a deleted key misses afterwards."""
        await store.write("foo", b"bar")

        await store.delete("foo")

        with pytest.raises(NoProducerError):
            await store.get("foo")

    @pytest.mark.asyncio
    async def test_delete_tolerates_unlink_race(self):
        """Test that an entry vanishing between stat and unlink is not an error."""
        storage = StorageTestFactory.not_found_on("unlink")
        store = CacheStore("/cache", storage=storage)
        await store.write("foo", b"bar")

        await store.delete("foo")

    @pytest.mark.parametrize("operation", ["stat", "unlink"])
    @pytest.mark.asyncio
    async def test_delete_io_failure_carries_code(self, operation):
        """Test that other stat/unlink failures raise CacheIOError."""
        storage = StorageTestFactory.permission_denied(operation)
        store = CacheStore("/cache", storage=storage)
        await store.write("foo", b"bar")

        with pytest.raises(CacheIOError) as exc_info:
            await store.delete("foo")

        assert exc_info.value.errno == errno.EACCES
        assert exc_info.value.details["operation"] == operation


@pytest.mark.unit
class TestCompression:
    """Compression strategy."""

    @pytest.mark.asyncio
    async def test_entries_are_gzipped_on_disk(self, compressed_store, memory_storage):
        """Test that stored bytes differ from the payload."""
        await compressed_store.write("foo", b"bar")

        stored = memory_storage.files[compressed_store.locate("foo")]
        assert stored != b"bar"
        assert gzip.decompress(stored) == b"bar"

    @pytest.mark.asyncio
    async def test_compression_is_transparent(self, memory_storage):
        """Test that get returns identical bytes with and without compression."""
        plain = CacheStore("/plain", storage=memory_storage)
        packed = CacheStore("/packed", compress=True, storage=memory_storage)
        payload = b"\x00binary\xff" * 64

        await plain.write("k", payload)
        await packed.write("k", payload)

        assert await plain.get("k") == await packed.get("k") == payload

    @pytest.mark.asyncio
    async def test_filled_entries_are_compressed(self, compressed_store, memory_storage):
        """Test that write-back goes through the codec."""
        await compressed_store.get("k", CountingProducer(b"computed"))
        await compressed_store.drain()

        assert gzip.decompress(memory_storage.files[compressed_store.locate("k")]) == b"computed"

    @pytest.mark.asyncio
    async def test_uncompressed_entry_read_by_compressing_store(
        self, store, compressed_store, debug_messages
    ):
        """Test that undecodable entries fail with CodecError, not a miss."""
        await store.write("foo", b"bar")
        producer = CountingProducer()

        with pytest.raises(CodecError) as exc_info:
            await compressed_store.get("foo", producer)

        assert producer.calls == 0
        assert exc_info.value.key == "foo"
        assert any("decode" in message for message in debug_messages)

    def test_codec_selected_at_construction(self, memory_storage):
        """Test the strategy choice."""
        assert CacheStore("/c", storage=memory_storage).compression == "identity"
        assert CacheStore("/c", compress=True, storage=memory_storage).compression == "gzip"
        assert (
            CacheStore("/c", compress=True, codec=IdentityCodec(), storage=memory_storage)
            .compression == "identity"
        )


@pytest.mark.unit
class TestMonitoring:
    """stats() and health_check()."""

    @pytest.mark.asyncio
    async def test_stats_counts_operations(self, store):
        """Test counters across a typical sequence."""
        await store.get("a", CountingProducer(b"1"))
        await store.drain()
        await store.get("a")
        await store.delete("a")
        await store.delete("a")

        stats = store.stats()

        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["fills"] == 1
        assert stats["writes"] == 1
        assert stats["deletes"] == 1
        assert stats["total_requests"] == 2
        assert stats["hit_rate"] == 0.5
        assert stats["pending_writes"] == 0
        assert stats["root"] == "/cache"
        assert stats["compression"] == "identity"

    @pytest.mark.asyncio
    async def test_health_check_healthy(self, store):
        """Test health when the root can be created."""
        health = await store.health_check()

        assert health["status"] == "healthy"
        assert "stats" in health

    @pytest.mark.asyncio
    async def test_health_check_unhealthy(self):
        """Test health when the root cannot be created."""
        storage = StorageTestFactory.permission_denied("makedirs")
        store = CacheStore("/cache", storage=storage)

        health = await store.health_check()

        assert health["status"] == "unhealthy"
        assert "Permission denied" in health["error"]


@pytest.mark.unit
class TestConstruction:
    """Store configuration."""

    def test_default_root_is_cache_under_cwd(self, tmp_path, monkeypatch):
        """Test the default root."""
        monkeypatch.chdir(tmp_path)

        store = CacheStore(storage=FaultyStorage())

        assert store.root == os.path.join(str(tmp_path), "cache")

    def test_locate_matches_layout(self, store):
        """Test that locate exposes the raw entry path."""
        path = store.locate("foo")

        assert path == os.path.join("/cache", "0", "0beec7b5ea3f0fdbc95d0dd47f3c5bc275da8a33")
