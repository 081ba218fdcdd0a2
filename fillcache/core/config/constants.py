"""
System Constants and Enumerations

This module defines constants and enumerations used across fillcache.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for magic numbers
- Type-safe enums for stage-tagged logging

Author: System Architect
Date: 2026-10-19
"""

import hashlib
from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Cache operation stages.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}

    The get stages follow its state machine:
        START -> LOCATING -> READING -> HIT_DECOMPRESSING -> DONE
                                     -> MISS_NO_PRODUCER -> FAILED
                                     -> MISS_PRODUCING -> WRITING_BACK -> DONE
                                     -> READ_ERROR -> FAILED
    """

    # Lifecycle
    INITIALIZATION = "0.0_INITIALIZATION"
    SHUTDOWN = "0.1_SHUTDOWN"

    # get()
    READING = "1.1_READING"
    HIT_DECOMPRESSING = "1.2_HIT_DECOMPRESSING"
    MISS_NO_PRODUCER = "1.3_MISS_NO_PRODUCER"
    MISS_PRODUCING = "1.4_MISS_PRODUCING"
    WRITING_BACK = "1.5_WRITING_BACK"
    READ_ERROR = "1.6_READ_ERROR"

    # write()
    WRITE = "2.0_WRITE"
    WRITE_ERROR = "2.1_WRITE_ERROR"

    # delete()
    DELETE = "3.0_DELETE"
    DELETE_ERROR = "3.1_DELETE_ERROR"


# ============================================================================
# Storage Layout
# ============================================================================

# Directory created under the working directory when no root is configured
DEFAULT_CACHE_DIRNAME = "cache"

# Number of leading hex characters used as the shard subdirectory (16 shards)
SHARD_PREFIX_LENGTH = 1

# Digest used when none is configured; matches existing on-disk layouts
DEFAULT_DIGEST_ALGORITHM = "sha1"

# SHA-1 strength or better
MIN_DIGEST_SIZE_BYTES = 20

# Fixed-length algorithms usable for key hashing (shake_* need an explicit length)
SUPPORTED_DIGEST_ALGORITHMS = frozenset(
    name
    for name in hashlib.algorithms_guaranteed
    if not name.startswith("shake_")
    and hashlib.new(name, usedforsecurity=False).digest_size >= MIN_DIGEST_SIZE_BYTES
)


# ============================================================================
# Compression
# ============================================================================

DEFAULT_COMPRESSION_LEVEL = 9
MIN_COMPRESSION_LEVEL = 1
MAX_COMPRESSION_LEVEL = 9

# Number of digest characters included in log records
LOG_KEY_DIGEST_LENGTH = 12
