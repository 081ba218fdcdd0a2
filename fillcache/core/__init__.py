"""
Core Module

Foundational components: configuration, logging, exceptions and the
protocols for injected services.
"""

from .exceptions import (
    CacheError,
    CacheIOError,
    CodecError,
    ConfigurationError,
    FillCacheError,
    NoProducerError,
)
from .logging import get_logger, log_stage, setup_logging

__all__ = [
    "CacheError",
    "CacheIOError",
    "CodecError",
    "ConfigurationError",
    "FillCacheError",
    "NoProducerError",
    "get_logger",
    "log_stage",
    "setup_logging",
]
