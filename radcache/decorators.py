"""
Caching decorators for automatic cache management.

Provides a decorator that checks the cache before execution and caches
results after computation, through a RadCache accessor.
"""

import functools
import hashlib
import json
from typing import Any, Callable, Optional, TypeVar, Union

from radcache import codecs
from radcache.client import TTL, RadCache
from radcache.codecs import Codec
from radcache.logging import cache_logger as logger

T = TypeVar("T")


def _generate_cache_key(
    key_template: str,
    args: tuple,
    kwargs: dict,
) -> str:
    """
    Generate a cache key from template and function arguments.

    Supports:
    - Positional placeholders: {0}, {1}, etc.
    - Named placeholders: {user_id}, {limit}, etc.
    - Hash suffix when the template cannot be filled

    Examples:
        key_template="user:{0}:scores" with args=(123,) -> "user:123:scores"
        key_template="user:{user_id}:matches:{limit}" -> "user:123:matches:10"
    """
    try:
        return key_template.format(*args, **kwargs)
    except (IndexError, KeyError):
        args_hash = hashlib.md5(
            json.dumps({"args": str(args), "kwargs": str(kwargs)}, sort_keys=True).encode()
        ).hexdigest()[:8]
        return f"{key_template}:{args_hash}"


def cached(
    cache: RadCache,
    key_template: Union[str, Callable[..., str]],
    ttl: TTL = None,
    codec: Codec[Any] = codecs.JSON,
    skip_cache_if: Optional[Callable[..., bool]] = None,
) -> Callable:
    """
    Decorator for caching function results.

    Args:
        cache: Accessor to read and write through (its prefix applies)
        key_template: Logical key template string or callable that returns key
            - String: Supports {0}, {1}, {arg_name} placeholders
            - Callable: Function that takes same args and returns key string
        ttl: Time-to-live (seconds or timedelta); None for no expiry
        codec: Codec for the result (default: JSON)
        skip_cache_if: Optional callable to skip caching conditionally

    Usage:
        @cached(cache, "user:{0}:scores", ttl=300)
        def get_user_scores(user_id: int):
            return expensive_computation()

    Notes:
        - If the function returns None, it won't be cached
        - Cache errors propagate (they are also reported to the sink)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        def build_key(*args, **kwargs) -> str:
            if callable(key_template):
                return key_template(*args, **kwargs)
            return _generate_cache_key(key_template, args, kwargs)

        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            if skip_cache_if and skip_cache_if(*args, **kwargs):
                return func(*args, **kwargs)

            cache_key = build_key(*args, **kwargs)
            logger.debug("cached_call", function=func.__name__, key=cache_key)
            return cache.get_or_compute(
                cache_key, lambda: func(*args, **kwargs), ttl=ttl, codec=codec
            )

        wrapper.cache_key_template = key_template
        wrapper.cache_ttl = ttl

        def invalidate(*args, **kwargs) -> bool:
            """Invalidate cache for specific arguments."""
            return cache.delete(build_key(*args, **kwargs)) > 0

        wrapper.invalidate = invalidate
        return wrapper

    return decorator


__all__ = ["cached"]
