"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .storage_factory import CountingProducer, FaultyStorage, StorageTestFactory

__all__ = ["CountingProducer", "FaultyStorage", "StorageTestFactory"]
