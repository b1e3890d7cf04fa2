"""
Error taxonomy for radcache.

Every error raised by the cache accessor derives from RadCacheError, so
callers can catch the whole family in one place. Store failures keep the
original redis exception as ``__cause__``.
"""

from typing import Optional


class RadCacheError(Exception):
    """Base class for all radcache errors."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class SerializationError(RadCacheError):
    """A value could not be encoded to its stored text form."""


class DeserializationError(RadCacheError):
    """Stored text could not be decoded as JSON."""


class StoreError(RadCacheError):
    """The underlying store call failed."""


class KeyNotFoundError(StoreError):
    """The physical key is absent or has expired."""

    def __init__(self, key: str):
        super().__init__(f"key not found: {key}", key=key)


class TypeMismatchError(StoreError):
    """Stored text is not a valid value of the requested type."""


class CacheNotConfiguredError(RadCacheError):
    """A store operation was issued before a redis client was attached."""


__all__ = [
    "RadCacheError",
    "SerializationError",
    "DeserializationError",
    "StoreError",
    "KeyNotFoundError",
    "TypeMismatchError",
    "CacheNotConfiguredError",
]
