"""
工具函数单元测试：URL 校验、响应头清理、meta 提取、嵌入判断、成就进度
"""
from __future__ import annotations

from datetime import datetime, timedelta

import httpx
import pytest

from bookmark_hub.api.errors import format_validation_error
from bookmark_hub.models import UserAchievement
from bookmark_hub.storage import UserMetrics, apply_progress
from bookmark_hub.utils import (
    SSRFError,
    check_embeddable,
    extract_meta_info,
    hash_password,
    host_title,
    strip_frame_headers,
    validate_url,
)
from bookmark_hub.utils.cache import cached, clear_caches
from bookmark_hub.utils.security import password_context
from bookmark_hub.utils.http_client import is_host_allowed, is_ip_blocked


# ==================== URL 校验 ====================

@pytest.mark.parametrize("url", [
    "http://127.0.0.1/",
    "http://localhost:8000/",
    "http://10.1.2.3/",
    "http://192.168.1.1/router",
    "http://169.254.169.254/latest/meta-data",
    "http://[::1]/",
])
def test_validate_url_blocks_private_targets(url):
    with pytest.raises(SSRFError):
        validate_url(url)


@pytest.mark.parametrize("url", ["ftp://example.com/file", "file:///etc/passwd", "javascript:alert(1)", ""])
def test_validate_url_rejects_bad_schemes(url):
    with pytest.raises(SSRFError):
        validate_url(url)


def test_validate_url_private_allowed_when_disabled():
    assert validate_url("http://127.0.0.1:5000/", block_private=False) == "http://127.0.0.1:5000/"


def test_validate_url_allow_list():
    allowed = ["example.com"]

    assert validate_url("https://docs.example.com/a", block_private=False, allowed_hosts=allowed)
    with pytest.raises(SSRFError, match="allow-list"):
        validate_url("https://evil.test/", block_private=False, allowed_hosts=allowed)


def test_host_allow_list_matches_subdomains_only():
    assert is_host_allowed("api.example.com", ["example.com"])
    assert is_host_allowed("EXAMPLE.com", [".example.com"])
    assert not is_host_allowed("notexample.com", ["example.com"])


def test_is_ip_blocked():
    assert is_ip_blocked("172.16.5.4")
    assert is_ip_blocked("fe80::1")
    assert not is_ip_blocked("93.184.216.34")
    assert not is_ip_blocked("example.com")


# ==================== 响应头 ====================

def test_strip_frame_headers():
    headers = httpx.Headers({
        "X-Frame-Options": "SAMEORIGIN",
        "Content-Security-Policy": "default-src 'self'",
        "Content-Security-Policy-Report-Only": "default-src 'self'",
        "Content-Encoding": "gzip",
        "Content-Type": "text/html",
        "Cache-Control": "no-cache",
    })

    result = {k.lower(): v for k, v in strip_frame_headers(headers).items()}

    assert result == {"content-type": "text/html", "cache-control": "no-cache"}


# ==================== meta 提取 ====================

def test_extract_meta_prefers_open_graph():
    html = """
    <title>Plain title</title>
    <meta property="og:title" content="OG title">
    <meta content="OG description" property="og:description">
    <meta name="description" content="plain description">
    <link rel="shortcut icon" href="//cdn.example.com/fav.png">
    """

    meta = extract_meta_info(html, "https://example.com/article")

    assert meta == {
        "title": "OG title",
        "description": "OG description",
        "icon": "https://cdn.example.com/fav.png",
    }


def test_extract_meta_falls_back_to_favicon():
    meta = extract_meta_info("<html><title> Home </title></html>", "https://example.com/a/b")

    assert meta["title"] == "Home"
    assert meta["description"] is None
    assert meta["icon"] == "https://example.com/favicon.ico"


def test_extract_meta_resolves_relative_icon():
    html = '<link href="img/icon.svg" rel="icon">'

    meta = extract_meta_info(html, "https://example.com/docs/")

    assert meta["icon"] == "https://example.com/docs/img/icon.svg"


def test_host_title_drops_www():
    assert host_title("https://www.example.com/path") == "example.com"


# ==================== 嵌入判断 ====================

def test_check_embeddable_builtin_denylist():
    assert check_embeddable("https://chat.openai.com/c/1")[0] is False
    assert check_embeddable("https://example.com") == (True, None)


def test_check_embeddable_extra_denylist():
    can_embed, reason = check_embeddable("https://intranet.example.com", ["intranet.example.com"])

    assert can_embed is False
    assert "intranet.example.com" in reason


# ==================== 成就进度 ====================

def test_user_metrics_progress_for():
    metrics = UserMetrics(bookmark_count=3, category_count=2, visit_count=11)

    assert metrics.progress_for("bookmark_count") == 3
    assert metrics.progress_for("category_count") == 2
    assert metrics.progress_for("visit_count") == 11
    assert metrics.progress_for("unknown") == 0


def test_apply_progress_unlocks_once():
    record = UserAchievement(user_id=1, achievement_id=1, progress=0, unlocked_at=None)
    first = datetime(2024, 1, 1)

    assert apply_progress(record, 1, 1, first) is True
    assert record.unlocked_at == first

    assert apply_progress(record, 2, 1, first + timedelta(days=1)) is True
    assert record.progress == 2
    assert record.unlocked_at == first


def test_apply_progress_never_regresses():
    unlocked = datetime(2024, 1, 1)
    record = UserAchievement(user_id=1, achievement_id=1, progress=5, unlocked_at=unlocked)

    assert apply_progress(record, 0, 1, datetime(2024, 2, 1)) is False
    assert record.progress == 5
    assert record.unlocked_at == unlocked


# ==================== 其他 ====================

def test_password_hashing():
    hashed = hash_password("password")

    assert hashed != "password"
    assert password_context.verify("password", hashed)
    assert not password_context.verify("wrong", hashed)


async def test_cached_skips_none_results():
    clear_caches()
    calls = []

    @cached(ttl=60)
    async def lookup(key):
        calls.append(key)
        return None if key == "missing" else key.upper()

    assert await lookup("a") == "A"
    assert await lookup("a") == "A"
    await lookup("missing")
    await lookup("missing")

    assert calls == ["a", "missing", "missing"]
    clear_caches()


def test_format_validation_error():
    from fastapi.exceptions import RequestValidationError

    exc = RequestValidationError([
        {"loc": ("body", "name"), "msg": "Field required", "type": "missing"},
    ])

    assert format_validation_error(exc) == 'Validation error: Field required at "name"'
