"""iframe 嵌入可行性判断"""
from typing import Iterable, Optional, Tuple

# 已知设置了 X-Frame-Options / frame-ancestors 的站点
NON_EMBEDDABLE_SITES = [
    "chat.openai.com",
    "linkedin.com",
    "facebook.com",
    "twitter.com",
]


def check_embeddable(url: str, extra_denylist: Iterable[str] = ()) -> Tuple[bool, Optional[str]]:
    """
    按域名黑名单做子串匹配，返回 (能否嵌入, 原因)
    """
    lowered = url.lower()
    for site in [*NON_EMBEDDABLE_SITES, *extra_denylist]:
        if site and site.lower() in lowered:
            return False, f"{site} does not allow being embedded in frames"
    return True, None
