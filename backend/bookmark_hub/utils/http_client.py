"""
出站 HTTP 工具，/proxy 和 /bookmarks/meta 共用

- 目标校验：只允许 http/https，拒绝本机、内网和云元数据地址，可选主机白名单
- 重定向的每一跳都重新校验
- 超时、重定向次数、响应大小都有上限
- 剥离禁止 iframe 嵌入的响应头，提取页面标题/描述/图标
"""

import re
import socket
import ipaddress
from urllib.parse import urlparse, urljoin
from typing import Optional, Dict, Iterable
import httpx


# ==================== 安全配置 ====================

# 禁止访问的内网 IP 段
BLOCKED_IP_RANGES = [
    ipaddress.ip_network("127.0.0.0/8"),      # localhost
    ipaddress.ip_network("10.0.0.0/8"),       # 私有网络
    ipaddress.ip_network("172.16.0.0/12"),    # 私有网络
    ipaddress.ip_network("192.168.0.0/16"),   # 私有网络
    ipaddress.ip_network("169.254.0.0/16"),   # 链路本地
    ipaddress.ip_network("0.0.0.0/8"),        # 当前网络
    ipaddress.ip_network("100.64.0.0/10"),    # 运营商 NAT
    ipaddress.ip_network("::1/128"),          # IPv6 localhost
    ipaddress.ip_network("fc00::/7"),         # IPv6 私有
    ipaddress.ip_network("fe80::/10"),        # IPv6 链路本地
]

# 禁止访问的主机名
BLOCKED_HOSTNAMES = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "::1",
    "metadata.google.internal",  # GCP 元数据服务
    "169.254.169.254",           # AWS/云厂商元数据服务
]

# 允许的协议
ALLOWED_SCHEMES = ["http", "https"]

# 阻止 iframe 嵌入的响应头
FRAME_BLOCKING_HEADERS = {
    "x-frame-options",
    "content-security-policy",
    "content-security-policy-report-only",
}
# httpx 已解码/重新分块后失效的头，以及对本站无意义的第三方 Cookie
DROPPED_HEADERS = {
    "transfer-encoding", "content-encoding", "content-length", "connection", "set-cookie",
}

# 默认配置
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_MAX_RESPONSE_SIZE = 5 * 1024 * 1024  # 5MB
BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


# ==================== 安全检查 ====================

class SSRFError(Exception):
    """目标地址不允许访问"""


class ResponseTooLargeError(Exception):
    """响应体超过大小限制"""


def is_ip_blocked(ip: str) -> bool:
    """IP 是否落在禁止网段，非 IP 字符串返回 False"""
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return any(address in network for network in BLOCKED_IP_RANGES)


def is_host_allowed(hostname: str, allowed_hosts: Iterable[str]) -> bool:
    """主机名是否命中白名单（含子域名）"""
    hostname = hostname.lower()
    for allowed in allowed_hosts:
        allowed = allowed.lower().lstrip(".")
        if hostname == allowed or hostname.endswith("." + allowed):
            return True
    return False


def _check_resolved_addresses(hostname: str):
    """解析主机名，任一地址落在禁止网段即拒绝"""
    try:
        infos = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror:
        raise SSRFError(f"Could not resolve host: {hostname}")
    except (UnicodeError, OSError) as e:
        raise SSRFError(f"URL validation failed: {e}")

    for *_, sockaddr in infos:
        if is_ip_blocked(sockaddr[0]):
            raise SSRFError(f"Host {hostname} resolves to a blocked address: {sockaddr[0]}")


def validate_url(
    url: str,
    block_private: bool = True,
    allowed_hosts: Optional[Iterable[str]] = None,
) -> str:
    """
    校验代理目标

    Args:
        url: 目标 URL
        block_private: 是否拒绝本机、内网、链路本地和云元数据地址
        allowed_hosts: 非空时只允许这些主机及其子域名

    Returns:
        原样返回通过校验的 URL

    Raises:
        SSRFError: 目标不允许访问
    """
    if not url:
        raise SSRFError("URL must not be empty")

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        raise SSRFError("Invalid URL format")

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise SSRFError(f"Scheme not allowed: {parsed.scheme or '(none)'}; only http/https are supported")
    if not hostname:
        raise SSRFError("URL has no host")

    if allowed_hosts and not is_host_allowed(hostname, allowed_hosts):
        raise SSRFError(f"Host not in allow-list: {hostname}")

    if block_private:
        if hostname.lower() in BLOCKED_HOSTNAMES:
            raise SSRFError(f"Host is blocked: {hostname}")
        if is_ip_blocked(hostname):
            raise SSRFError(f"Private network address is blocked: {hostname}")
        _check_resolved_addresses(hostname)

    return url


# ==================== HTTP 客户端 ====================

async def safe_fetch(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    max_size: int = DEFAULT_MAX_RESPONSE_SIZE,
    block_private: bool = True,
    allowed_hosts: Optional[Iterable[str]] = None,
) -> httpx.Response:
    """
    GET 目标页面，跟随重定向

    每一跳（包括重定向）都经过 validate_url 校验。

    Raises:
        SSRFError: URL 或重定向目标不允许访问
        ResponseTooLargeError: Content-Length 超过 max_size
        httpx.HTTPError: 网络错误、超时、重定向过多
    """
    allowed_hosts = list(allowed_hosts or [])
    validate_url(url, block_private=block_private, allowed_hosts=allowed_hosts)

    async def check_hop(request: httpx.Request):
        validate_url(str(request.url), block_private=block_private, allowed_hosts=allowed_hosts)

    async with httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        max_redirects=max_redirects,
        headers=BROWSER_HEADERS,
        event_hooks={"request": [check_hop]},
    ) as client:
        response = await client.get(url)

    declared = response.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_size:
        raise ResponseTooLargeError(f"Response too large: {declared} > {max_size}")
    return response


def strip_frame_headers(headers: httpx.Headers) -> Dict[str, str]:
    """移除阻止 iframe 嵌入的响应头"""
    result = {}
    for key, value in headers.items():
        key_lower = key.lower()
        if key_lower in FRAME_BLOCKING_HEADERS or key_lower in DROPPED_HEADERS:
            continue
        result[key] = value
    return result


# ==================== 网页信息提取 ====================

def _search_meta(html: str, attr: str, name: str) -> Optional[str]:
    """按 attr=name 查找 meta content，两种属性顺序都尝试"""
    match = re.search(
        rf'<meta[^>]+{attr}=["\']{name}["\'][^>]+content=["\']([^"\']+)["\']',
        html, re.IGNORECASE
    )
    if not match:
        match = re.search(
            rf'<meta[^>]+content=["\']([^"\']+)["\'][^>]+{attr}=["\']{name}["\']',
            html, re.IGNORECASE
        )
    return match.group(1).strip() if match else None


def extract_meta_info(html: str, base_url: str) -> Dict[str, Optional[str]]:
    """
    从 HTML 中提取标题、描述和图标

    og:title / og:description 优先于 <title> / description。
    没找到图标时回退到站点根目录的 /favicon.ico。
    """
    result = {"title": None, "description": None, "icon": None}

    if html:
        title_match = re.search(r'<title[^>]*>([^<]+)</title>', html, re.IGNORECASE)
        if title_match:
            result["title"] = title_match.group(1).strip()
        result["title"] = _search_meta(html, "property", "og:title") or result["title"]

        result["description"] = (
            _search_meta(html, "property", "og:description")
            or _search_meta(html, "name", "description")
        )

        icon_patterns = [
            r'<link[^>]+rel=["\'](?:shortcut )?icon["\'][^>]+href=["\']([^"\']+)["\']',
            r'<link[^>]+href=["\']([^"\']+)["\'][^>]+rel=["\'](?:shortcut )?icon["\']',
            r'<link[^>]+rel=["\']apple-touch-icon["\'][^>]+href=["\']([^"\']+)["\']',
        ]
        for pattern in icon_patterns:
            icon_match = re.search(pattern, html, re.IGNORECASE)
            if icon_match:
                icon_url = icon_match.group(1)
                if icon_url.startswith("//"):
                    icon_url = "https:" + icon_url
                elif not icon_url.startswith(("http://", "https://")):
                    icon_url = urljoin(base_url, icon_url)
                result["icon"] = icon_url
                break

    if not result["icon"]:
        parsed = urlparse(base_url)
        result["icon"] = f"{parsed.scheme}://{parsed.netloc}/favicon.ico"

    return result


def host_title(url: str) -> str:
    """用域名充当标题"""
    return urlparse(url).netloc.replace("www.", "")
