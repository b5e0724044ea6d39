"""内存缓存"""
from cachetools import TTLCache
from functools import wraps
from typing import Callable, Dict, Optional
import hashlib
import json

from ..config import settings

# 全局缓存实例
cache = TTLCache(maxsize=settings.CACHE_MAX_SIZE, ttl=settings.CACHE_TTL)

# 自定义 TTL 的缓存按 ttl 分桶
_ttl_caches: Dict[int, TTLCache] = {}


def make_cache_key(*args, **kwargs) -> str:
    """生成缓存键"""
    key_data = json.dumps({"args": args, "kwargs": kwargs}, sort_keys=True, default=str)
    return hashlib.md5(key_data.encode()).hexdigest()


def _cache_for(ttl: Optional[int]) -> TTLCache:
    if ttl is None or ttl == settings.CACHE_TTL:
        return cache
    if ttl not in _ttl_caches:
        _ttl_caches[ttl] = TTLCache(maxsize=settings.CACHE_MAX_SIZE, ttl=ttl)
    return _ttl_caches[ttl]


def clear_caches():
    """清空所有缓存"""
    cache.clear()
    for bucket in _ttl_caches.values():
        bucket.clear()


def cached(ttl: int = None):
    """异步函数结果缓存装饰器，None 结果不缓存

    Usage:
        @cached(ttl=600)
        async def fetch_url_meta(url: str):
            ...
    """
    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            store = _cache_for(ttl)
            cache_key = f"{func.__module__}.{func.__name__}:{make_cache_key(*args, **kwargs)}"

            if cache_key in store:
                return store[cache_key]

            result = await func(*args, **kwargs)

            if result is not None:
                store[cache_key] = result

            return result
        return wrapper
    return decorator
