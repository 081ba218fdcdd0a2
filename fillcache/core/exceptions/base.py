"""
Base Exception Class

This module contains ONLY the base exception class that all other exceptions inherit from.
All specialized exceptions are in their respective themed modules.

Author: System Architect
Date: 2026-10-19
"""

from typing import Any


class FillCacheError(Exception):
    """
    Base exception for all fillcache errors.

    All custom exceptions inherit from this class to enable:
    - Consistent error handling
    - Key correlation (the cache key the failing operation was working on)
    - Structured error logging

    Attributes:
        message: Error message
        key: Cache key involved in the failure (if any)
        details: Additional error details (dict)

    Example:
        raise CacheIOError(
            "Failed to write cache entry",
            key="user:42",
            details={"errno": 13, "operation": "write"}
        )
    """

    def __init__(
        self, message: str, key: str | bytes | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.key = key
        self.details = (details or {}).copy()  # Create a copy to prevent external modification
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging.

        Returns:
            Dict with error_type, message, key, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "key": self.key,
            "details": self.details,
        }

    def with_suggestion(self, suggestion: str) -> "FillCacheError":
        """
        Add a suggestion to help users fix the error.

        Returns:
            Self (for method chaining)
        """
        self.details["suggestion"] = suggestion
        return self

    def with_context(self, **context) -> "FillCacheError":
        """
        Add additional context to the error details.

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        key_str = f", key={self.key!r}" if self.key is not None else ""
        return f"{self.__class__.__name__}(message='{self.message}'{key_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        key: str | bytes | None = None,
        **details
    ) -> "FillCacheError":
        """
        Create an error of this class from another exception.

        Useful for wrapping OSError / zlib errors with cache context.

        Args:
            exc: Original exception to wrap
            message: Custom message (defaults to original exception message)
            key: Cache key involved
            **details: Additional context to include

        Example:
            >>> try:
            ...     await storage.write_bytes(path, data)
            ... except OSError as e:
            ...     raise CacheIOError.from_exception(e, key=key, operation="write")
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, key=key, details=error_details)


# Configuration exception (kept here as it's fundamental)
class ConfigurationError(FillCacheError):
    """Raised when store or settings configuration is invalid."""
    pass
