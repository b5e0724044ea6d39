"""工具函数"""
from .cache import cache, cached, clear_caches
from .security import hash_password
from .embed import check_embeddable, NON_EMBEDDABLE_SITES
from .http_client import (
    safe_fetch,
    strip_frame_headers,
    extract_meta_info,
    host_title,
    validate_url,
    SSRFError,
    ResponseTooLargeError,
)

__all__ = [
    "cache", "cached", "clear_caches",
    "hash_password",
    "check_embeddable", "NON_EMBEDDABLE_SITES",
    "safe_fetch", "strip_frame_headers", "extract_meta_info", "host_title",
    "validate_url", "SSRFError", "ResponseTooLargeError",
]
