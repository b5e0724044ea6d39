"""iframe 代理 API

书签在页面内用 iframe 打开，很多站点通过 X-Frame-Options / CSP 禁止被嵌入。
/proxy 在服务端抓取目标页面，去掉这些响应头后原样返回。
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel

from ...config import settings
from ...utils import safe_fetch, strip_frame_headers, check_embeddable, SSRFError

logger = logging.getLogger(__name__)

router = APIRouter()


class EmbedCheckResponse(BaseModel):
    """嵌入检查响应"""
    url: str
    canEmbed: bool
    reason: Optional[str] = None


@router.get("/proxy")
async def proxy_page(url: Optional[str] = Query(None, description="要抓取的页面 URL")):
    """抓取目标页面并移除阻止 iframe 嵌入的响应头"""
    if not url:
        raise HTTPException(status_code=400, detail="URL parameter is required")

    try:
        response = await safe_fetch(
            url,
            timeout=settings.PROXY_TIMEOUT,
            max_redirects=settings.PROXY_MAX_REDIRECTS,
            max_size=settings.PROXY_MAX_RESPONSE_SIZE,
            block_private=settings.PROXY_BLOCK_PRIVATE_NETWORKS,
            allowed_hosts=settings.PROXY_ALLOWED_HOSTS or None,
        )
    except SSRFError as e:
        logger.warning(f"[Proxy] 拒绝目标: {url} - {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.warning(f"[Proxy] 抓取失败: {url} - {e!r}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch URL: {str(e) or e.__class__.__name__}")

    # 上游返回什么状态码都按 200 交给 iframe，代理自身的失败才用 4xx/5xx
    content_type = response.headers.get("content-type", "")
    logger.info(f"[Proxy] {response.status_code} {url} ({len(response.content)} bytes)")

    return Response(
        content=response.content,
        status_code=200,
        headers=strip_frame_headers(response.headers),
        media_type=content_type.split(";")[0] if content_type else None,
    )


@router.get("/embed-check", response_model=EmbedCheckResponse)
async def embed_check(url: Optional[str] = Query(None, description="要检查的页面 URL")):
    """按已知黑名单判断页面能否直接在 iframe 中打开"""
    if not url:
        raise HTTPException(status_code=400, detail="URL parameter is required")

    can_embed, reason = check_embeddable(url, settings.EMBED_DENYLIST)
    return EmbedCheckResponse(url=url, canEmbed=can_embed, reason=reason)
