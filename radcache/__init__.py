"""
radcache: prefixed, typed accessor over Redis.

Provides:
- JSON values (set/get)
- Typed primitives through codecs (string, int, int64, bool, float32, float64)
- Key prefixing and batched deletes
- Error routing to a diagnostic sink (no-op by default)

Usage:
    import redis
    from radcache import CacheOptions, RadCache

    cache = RadCache.create(CacheOptions(prefix="test_"), client=redis.Redis())
    cache.set("user:123:scores", {"python": 0.9}, ttl=300)
    scores = cache.get("user:123:scores")

    cache.set_int("n", 42, ttl=3600)
    cache.get_int_or_default("missing", -1)  # -> -1
"""

from radcache.client import TTL, RadCache
from radcache.codecs import BOOL, FLOAT32, FLOAT64, INT, INT64, JSON, STRING, Codec
from radcache.config import CacheOptions, Settings, get_settings
from radcache.decorators import cached
from radcache.errors import (
    CacheNotConfiguredError,
    DeserializationError,
    KeyNotFoundError,
    RadCacheError,
    SerializationError,
    StoreError,
    TypeMismatchError,
)
from radcache.sinks import DiagnosticSink, NullSink

__version__ = "0.1.0"

__all__ = [
    "RadCache",
    "TTL",
    "CacheOptions",
    "Settings",
    "get_settings",
    "cached",
    # Codecs
    "Codec",
    "JSON",
    "STRING",
    "INT",
    "INT64",
    "BOOL",
    "FLOAT32",
    "FLOAT64",
    # Sinks
    "DiagnosticSink",
    "NullSink",
    # Errors
    "RadCacheError",
    "SerializationError",
    "DeserializationError",
    "StoreError",
    "KeyNotFoundError",
    "TypeMismatchError",
    "CacheNotConfiguredError",
]
