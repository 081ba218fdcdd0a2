"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from fillcache.core.config import settings as settings_module  # noqa: E402
from fillcache.core.interfaces import InMemoryStorage  # noqa: E402
from fillcache.infrastructure.cache import CacheStore  # noqa: E402
from fillcache.infrastructure.cache import cache_store as cache_store_module  # noqa: E402

# pytest-asyncio runs in auto mode via pyproject.toml

MEMORY_ROOT = "/cache"


# ============================================================================
# Settings Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop the settings and store singletons so each test sees fresh state."""
    settings_module._settings = None
    cache_store_module._cache_store = None
    yield
    settings_module._settings = None
    cache_store_module._cache_store = None


# ============================================================================
# Diagnostic Sink
# ============================================================================


@pytest.fixture
def debug_messages():
    """List collecting every diagnostic string a store emits."""
    return []


# ============================================================================
# Stores
# ============================================================================


@pytest.fixture
def memory_storage():
    """Empty in-memory storage backend."""
    return InMemoryStorage()


@pytest.fixture
def store(memory_storage, debug_messages):
    """Uncompressed store over in-memory storage rooted at /cache."""
    return CacheStore(MEMORY_ROOT, storage=memory_storage, debug=debug_messages.append)


@pytest.fixture
def compressed_store(memory_storage, debug_messages):
    """Gzip store over in-memory storage rooted at /cache."""
    return CacheStore(
        MEMORY_ROOT, compress=True, storage=memory_storage, debug=debug_messages.append
    )


@pytest.fixture
def cache_root(tmp_path):
    """Real directory to use as a cache root (not created up front)."""
    return str(tmp_path / "c")


@pytest.fixture
def disk_store(cache_root, debug_messages):
    """Uncompressed store on the real filesystem."""
    return CacheStore(cache_root, debug=debug_messages.append)


@pytest.fixture
def compressed_disk_store(cache_root, debug_messages):
    """Gzip store on the real filesystem."""
    return CacheStore(cache_root, compress=True, debug=debug_messages.append)
