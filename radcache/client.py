"""
Prefixed, typed accessor over a Redis client.

Provides a cache handle with:
- Key prefixing (physical key = prefix + logical key)
- JSON values through set()/get()
- Typed primitive values through codecs (set_int, get_bool, ...)
- Error routing to a diagnostic sink

Every error is raised to the caller and reported to the sink, except the
*_or_default getters (reported, then replaced by the fallback) and
exists() (reported, then False).
"""

import math
from collections.abc import Callable, Mapping
from contextlib import contextmanager
from datetime import timedelta
from typing import Any, Iterator, Optional, TypeVar, Union

import redis
from redis.exceptions import RedisError

from radcache import codecs
from radcache.codecs import Codec
from radcache.config import CacheOptions, Settings, get_settings
from radcache.errors import (
    CacheNotConfiguredError,
    KeyNotFoundError,
    RadCacheError,
    StoreError,
)
from radcache.logging import cache_logger as logger
from radcache.logging import get_logger
from radcache.sinks import NULL_SINK, DiagnosticSink

T = TypeVar("T")

TTL = Union[int, float, timedelta, None]


def _expiry_ms(ttl: TTL) -> Optional[int]:
    """Convert a TTL to milliseconds. None means no expiry."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        return int(ttl.total_seconds() * 1000)
    if isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
        raise TypeError(f"ttl must be seconds or timedelta, got {type(ttl).__name__}")
    if not math.isfinite(ttl):
        raise ValueError(f"ttl must be finite, got {ttl!r}")
    return int(ttl * 1000)


class RadCache:
    """
    Cache accessor bound to one key prefix.

    The redis client is shared, not owned: closing it is the caller's job.
    Several accessors with different prefixes may use the same client.

    Usage:
        cache = RadCache.create(CacheOptions(prefix="test_"), client=redis.Redis())
        cache.set_string("a", "hello", ttl=3600)
        cache.get_string("a")  # -> "hello", stored under "test_a"
    """

    def __init__(
        self,
        client: Optional["redis.Redis"] = None,
        options: Optional[CacheOptions] = None,
        sink: Optional[DiagnosticSink] = None,
    ):
        self._options = options or CacheOptions()
        self.client = client
        self.sink: DiagnosticSink = sink if sink is not None else NULL_SINK

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def create_default(
        cls,
        client: Optional["redis.Redis"] = None,
        sink: Optional[DiagnosticSink] = None,
    ) -> "RadCache":
        """Accessor with the default "rad_" prefix."""
        return cls(client=client, sink=sink)

    @classmethod
    def create(
        cls,
        options: Union[CacheOptions, Mapping[str, Any]],
        client: Optional["redis.Redis"] = None,
        sink: Optional[DiagnosticSink] = None,
    ) -> "RadCache":
        """Accessor with caller-supplied options."""
        if not isinstance(options, CacheOptions):
            options = CacheOptions(**options)
        return cls(client=client, options=options, sink=sink)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RadCache":
        """
        Build an accessor and a pooled redis client from settings.

        Args:
            settings: Settings to use (default: get_settings())

        Returns:
            Accessor with client attached, and a structlog sink when
            settings.log_errors is set
        """
        settings = settings or get_settings()
        pool = redis.ConnectionPool.from_url(
            settings.redis_url,
            max_connections=settings.redis_max_connections,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
            decode_responses=False,  # codecs handle decoding
        )
        sink = get_logger("radcache.errors") if settings.log_errors else None
        logger.info(
            "radcache_configured",
            host=settings.redis_host,
            port=settings.redis_port,
            prefix=settings.cache_prefix,
        )
        return cls(
            client=redis.Redis(connection_pool=pool),
            options=settings.cache_options,
            sink=sink,
        )

    def use_redis(self, client: "redis.Redis") -> None:
        """Attach the redis client used by all store operations."""
        self.client = client

    def use_logger(self, sink: Optional[DiagnosticSink]) -> None:
        """Attach a diagnostic sink. None restores the no-op sink."""
        self.sink = sink if sink is not None else NULL_SINK

    @property
    def options(self) -> CacheOptions:
        return self._options

    @property
    def prefix(self) -> str:
        return self._options.prefix

    def physical_key(self, key: str) -> str:
        """Key as sent to the store."""
        return self._options.prefix + key

    def __repr__(self) -> str:
        return f"RadCache(prefix={self.prefix!r}, client={self.client!r})"

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def report_error(self, err: Any) -> None:
        """Route an error to the diagnostic sink."""
        self.sink.error(err)

    def _fail(self, err: RadCacheError) -> RadCacheError:
        self.report_error(err)
        return err

    @contextmanager
    def _store(self, command: str, key: Optional[str] = None) -> Iterator["redis.Redis"]:
        """Yield the client; wrap redis failures as StoreError and report them."""
        if self.client is None:
            raise self._fail(
                CacheNotConfiguredError(f"{command}: no redis client attached", key=key)
            )
        try:
            yield self.client
        except RedisError as e:
            err = StoreError(f"{command} {key}: {e}", key=key)
            self.report_error(err)
            raise err from e

    # =========================================================================
    # Serialization
    # =========================================================================

    def serialize(self, value: Any) -> str:
        """Encode a value as JSON text."""
        return codecs.JSON.encode(value)

    def deserialize(self, text: Union[str, bytes]) -> Any:
        """Decode JSON text into a value."""
        return codecs.JSON.decode(text)

    # =========================================================================
    # Generic codec operations
    # =========================================================================

    def set_value(self, key: str, value: T, codec: Codec[T], ttl: TTL = None) -> None:
        """
        Encode value with codec and store it.

        Args:
            key: Logical key
            value: Value to store
            codec: Codec for the value's type
            ttl: Seconds or timedelta; None for no expiry. Zero or negative
                stores the value already expired, i.e. removes the key.

        Raises:
            TypeError, ValueError: ttl is not a finite duration
            SerializationError: value cannot be encoded (store not called)
            StoreError: the store call failed
        """
        physical = self.physical_key(key)
        expiry = _expiry_ms(ttl)
        try:
            payload = codec.encode(value)
        except RadCacheError as e:
            e.key = physical
            raise self._fail(e)

        with self._store("SET", physical) as client:
            if expiry is not None and expiry <= 0:
                client.delete(physical)
            else:
                client.set(physical, payload, px=expiry)
        logger.debug("cache_set", key=physical, codec=codec.name, ttl_ms=expiry)

    def _fetch(self, key: str) -> Optional[bytes]:
        physical = self.physical_key(key)
        with self._store("GET", physical) as client:
            return client.get(physical)

    def _decode(self, key: str, raw: Union[str, bytes], codec: Codec[T]) -> T:
        try:
            return codec.decode(raw)
        except RadCacheError as e:
            e.key = self.physical_key(key)
            raise self._fail(e)

    def get_value(self, key: str, codec: Codec[T]) -> T:
        """
        Fetch a value and decode it with codec.

        Raises:
            KeyNotFoundError: key absent or expired
            TypeMismatchError: stored text is not a valid value for codec
            DeserializationError: stored text is not valid JSON (JSON codec)
            StoreError: the store call failed
        """
        raw = self._fetch(key)
        if raw is None:
            logger.debug("cache_miss", key=self.physical_key(key))
            raise self._fail(KeyNotFoundError(self.physical_key(key)))
        logger.debug("cache_hit", key=self.physical_key(key))
        return self._decode(key, raw, codec)

    def get_value_or_default(self, key: str, codec: Codec[T], fallback: T) -> T:
        """Like get_value(), but return fallback on any cache error."""
        try:
            return self.get_value(key, codec)
        except RadCacheError:
            return fallback

    def get_or_compute(
        self,
        key: str,
        compute: Callable[[], T],
        ttl: TTL = None,
        codec: Codec[Any] = codecs.JSON,
    ) -> T:
        """
        Return the cached value, or compute, store and return it.

        A miss is expected here and is not reported. None results are
        not cached.
        """
        raw = self._fetch(key)
        if raw is not None:
            logger.debug("cache_hit", key=self.physical_key(key))
            return self._decode(key, raw, codec)

        logger.debug("cache_miss", key=self.physical_key(key))
        result = compute()
        if result is not None:
            self.set_value(key, result, codec, ttl)
        return result

    # =========================================================================
    # JSON operations
    # =========================================================================

    def set(self, key: str, value: Any, ttl: TTL = None) -> None:
        """Store any JSON-serializable value."""
        self.set_value(key, value, codecs.JSON, ttl)

    def get(self, key: str) -> Any:
        """Fetch a JSON value stored with set()."""
        return self.get_value(key, codecs.JSON)

    # =========================================================================
    # Typed operations
    # =========================================================================

    def set_string(self, key: str, value: str, ttl: TTL = None) -> None:
        self.set_value(key, value, codecs.STRING, ttl)

    def get_string(self, key: str) -> str:
        return self.get_value(key, codecs.STRING)

    def get_string_or_default(self, key: str, fallback: str) -> str:
        return self.get_value_or_default(key, codecs.STRING, fallback)

    def set_int(self, key: str, value: int, ttl: TTL = None) -> None:
        self.set_value(key, value, codecs.INT, ttl)

    def get_int(self, key: str) -> int:
        return self.get_value(key, codecs.INT)

    def get_int_or_default(self, key: str, fallback: int) -> int:
        return self.get_value_or_default(key, codecs.INT, fallback)

    def set_int64(self, key: str, value: int, ttl: TTL = None) -> None:
        self.set_value(key, value, codecs.INT64, ttl)

    def get_int64(self, key: str) -> int:
        return self.get_value(key, codecs.INT64)

    def get_int64_or_default(self, key: str, fallback: int) -> int:
        return self.get_value_or_default(key, codecs.INT64, fallback)

    def set_bool(self, key: str, value: bool, ttl: TTL = None) -> None:
        self.set_value(key, value, codecs.BOOL, ttl)

    def get_bool(self, key: str) -> bool:
        return self.get_value(key, codecs.BOOL)

    def get_bool_or_default(self, key: str, fallback: bool) -> bool:
        return self.get_value_or_default(key, codecs.BOOL, fallback)

    def set_float32(self, key: str, value: float, ttl: TTL = None) -> None:
        self.set_value(key, value, codecs.FLOAT32, ttl)

    def get_float32(self, key: str) -> float:
        return self.get_value(key, codecs.FLOAT32)

    def get_float32_or_default(self, key: str, fallback: float) -> float:
        return self.get_value_or_default(key, codecs.FLOAT32, fallback)

    def set_float64(self, key: str, value: float, ttl: TTL = None) -> None:
        self.set_value(key, value, codecs.FLOAT64, ttl)

    def get_float64(self, key: str) -> float:
        return self.get_value(key, codecs.FLOAT64)

    def get_float64_or_default(self, key: str, fallback: float) -> float:
        return self.get_value_or_default(key, codecs.FLOAT64, fallback)

    # =========================================================================
    # Key Operations
    # =========================================================================

    def delete(self, key: str) -> int:
        """Delete one key. Returns the number of keys removed (0 or 1)."""
        physical = self.physical_key(key)
        with self._store("DEL", physical) as client:
            removed = client.delete(physical)
        logger.debug("cache_delete", key=physical, removed=removed)
        return int(removed or 0)

    def delete_many(self, *keys: str) -> int:
        """Delete several keys with one DEL. Returns the number removed."""
        if not keys:
            return 0
        physical = [self.physical_key(k) for k in keys]
        with self._store("DEL", ",".join(physical)) as client:
            removed = client.delete(*physical)
        logger.debug("cache_delete", keys=physical, removed=removed)
        return int(removed or 0)

    def exists(self, key: str) -> bool:
        """True iff the store reports exactly one matching key.

        Store errors are reported and read as False.
        """
        try:
            physical = self.physical_key(key)
            with self._store("EXISTS", physical) as client:
                return client.exists(physical) == 1
        except RadCacheError:
            return False

    def ttl(self, key: str) -> int:
        """Remaining TTL in seconds; -2 if the key is missing, -1 if it never expires."""
        physical = self.physical_key(key)
        with self._store("TTL", physical) as client:
            return int(client.ttl(physical))

    # =========================================================================
    # Health Check
    # =========================================================================

    def health_check(self) -> dict[str, Any]:
        """
        Get cache health status.

        Returns:
            Dictionary with health information
        """
        status: dict[str, Any] = {"prefix": self.prefix}
        if self.client is None:
            status["status"] = "unavailable"
            return status

        try:
            self.client.ping()
            memory_info = self.client.info("memory")
            clients_info = self.client.info("clients")
            status["memory_used"] = memory_info.get("used_memory_human", "unknown")
            status["connected_clients"] = clients_info.get("connected_clients", 0)
            status["status"] = "healthy"
        except RedisError as e:
            logger.warning("radcache_health_degraded", error=str(e))
            status["status"] = "degraded"
        return status


__all__ = ["RadCache", "TTL"]
