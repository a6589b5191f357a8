"""Disk caching utilities using diskcache."""

import inspect
from typing import Any, Optional, Callable, TypeVar, ParamSpec
from functools import wraps
import diskcache as dc
from .config import settings
from .logging_config import get_logger

# Type variables for decorator
P = ParamSpec('P')
T = TypeVar('T')

logger = get_logger(__name__)

# Global cache instance
_cache: Optional[dc.Cache] = None


def get_cache() -> dc.Cache:
    """Get or create the global cache instance."""
    global _cache
    if _cache is None:
        _cache = dc.Cache(
            directory=settings.cache_dir,
            size_limit=256 * 1024 * 1024,  # 256MB
            eviction_policy="least-recently-used",
        )
    return _cache


def _make_key(
    key_prefix: str,
    func: Callable[..., Any],
    args: tuple,
    kwargs: dict[str, Any],
    ignore_kwargs: list[str],
) -> str:
    filtered_kwargs = {k: v for k, v in kwargs.items() if k not in ignore_kwargs}
    return f"{key_prefix}:{func.__name__}:{args!r}:{sorted(filtered_kwargs.items())!r}"


def _lookup(key: str) -> Any:
    try:
        return get_cache().get(key)
    except Exception as e:
        logger.debug(f"Cache read failed for {key}: {e}")
        return None


def _store(key: str, value: Any, ttl_seconds: int) -> None:
    try:
        get_cache().set(key, value, expire=ttl_seconds)
    except Exception as e:
        logger.debug(f"Cache write failed for {key}: {e}")


def cached(
    ttl_seconds: Optional[int] = None,
    key_prefix: str = "",
    ignore_kwargs: Optional[list[str]] = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """
    Decorator to cache function results. Works on plain and async functions.

    ``None`` results are never stored so that a failed lookup is retried on
    the next call.

    Args:
        ttl_seconds: Time to live in seconds. If None, uses default from settings.
        key_prefix: Prefix for cache keys.
        ignore_kwargs: List of kwargs to ignore when generating cache key
            (HTTP clients, for instance).
    """
    ignore = ignore_kwargs or []

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        def ttl() -> int:
            if ttl_seconds is None:
                return settings.cache_ttl_days * 24 * 60 * 60
            return ttl_seconds

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                cache_key = _make_key(key_prefix, func, args, kwargs, ignore)
                result = _lookup(cache_key)
                if result is not None:
                    return result

                result = await func(*args, **kwargs)
                if result is not None:
                    _store(cache_key, result, ttl())
                return result

            return async_wrapper

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            cache_key = _make_key(key_prefix, func, args, kwargs, ignore)
            result = _lookup(cache_key)
            if result is not None:
                return result

            result = func(*args, **kwargs)
            if result is not None:
                _store(cache_key, result, ttl())
            return result

        return wrapper
    return decorator


def clear_cache() -> None:
    """Clear all cached data."""
    cache = get_cache()
    cache.clear()


def cache_stats() -> dict[str, Any]:
    """Get cache statistics."""
    cache = get_cache()
    return {
        "size": len(cache),
        "volume": cache.volume(),
        "statistics": cache.stats(enable=True),
    }
