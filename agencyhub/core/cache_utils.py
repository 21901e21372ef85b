"""
Caching utilities for dashboard aggregates.

Cached results are keyed by a version number that every tracked row change
bumps, so invalidation works on any cache backend without key scans.
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
DASHBOARD_CACHE_TTL = 300  # 5 minutes
ANALYTICS_CACHE_TTL = 600  # 10 minutes

DASHBOARD_VERSION_KEY = 'dashboard_version'


def get_dashboard_version():
    version = cache.get(DASHBOARD_VERSION_KEY)
    if version is None:
        cache.add(DASHBOARD_VERSION_KEY, 1, None)
        version = cache.get(DASHBOARD_VERSION_KEY, 1)
    return version


def bump_dashboard_version():
    """Invalidate every cached dashboard aggregate"""
    try:
        cache.incr(DASHBOARD_VERSION_KEY)
    except ValueError:
        # Key missing (evicted or never set)
        cache.set(DASHBOARD_VERSION_KEY, 2, None)
    except Exception as e:
        logger.warning(f"Could not bump dashboard cache version: {str(e)}")


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:v{get_dashboard_version()}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive aggregate queries

    Usage:
        @cached_query(cache_ttl=120, key_prefix="dashboard_counters")
        def get_counters(user_id):
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator
