"""书签路由"""
import logging
from typing import List, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from ...config import settings
from ...schemas import (
    BookmarkCreate, BookmarkUpdate, BookmarkResponse, VisitResponse,
    MessageResponse, UrlMetaRequest, UrlMetaResponse,
)
from ...storage import IStorage
from ...utils import cached, safe_fetch, extract_meta_info, host_title, SSRFError
from ..deps import get_storage, get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter()


# ==================== URL Meta ====================

@cached(ttl=600)
async def fetch_url_meta(url: str) -> dict:
    """抓取页面并提取 meta 信息（结果缓存 10 分钟）"""
    response = await safe_fetch(
        url,
        timeout=settings.PROXY_TIMEOUT,
        max_redirects=settings.PROXY_MAX_REDIRECTS,
        max_size=settings.PROXY_MAX_RESPONSE_SIZE,
        block_private=settings.PROXY_BLOCK_PRIVATE_NETWORKS,
    )
    response.raise_for_status()
    meta = extract_meta_info(response.text, str(response.url))
    meta["title"] = meta["title"] or host_title(url)
    return meta


@router.post("/meta", response_model=UrlMetaResponse)
async def get_url_meta(request: UrlMetaRequest):
    """获取 URL 的标题、描述、图标，用于预填添加书签表单"""
    url = request.url.strip()

    # 确保 URL 有协议
    if not url.startswith(("http://", "https://")):
        url = "https://" + url

    try:
        meta = await fetch_url_meta(url)
    except SSRFError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except httpx.TooManyRedirects:
        raise HTTPException(status_code=400, detail="Too many redirects")
    except (httpx.TimeoutException, httpx.ConnectError, httpx.HTTPStatusError) as e:
        # 抓不到页面时用域名当标题
        logger.info(f"[Bookmarks] meta 抓取失败，回退到域名: {url} - {e}")
        return UrlMetaResponse(title=host_title(url), url=url)
    except Exception as e:
        logger.warning(f"[Bookmarks] meta 抓取异常: {url} - {e}")
        return UrlMetaResponse(title=host_title(url), url=url)

    return UrlMetaResponse(
        title=meta["title"],
        description=meta["description"],
        icon=meta["icon"],
        url=url,
    )


# ==================== 查询 ====================

@router.get("", response_model=List[BookmarkResponse])
async def get_bookmarks(
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """获取书签列表"""
    try:
        return await storage.get_bookmarks(user_id)
    except Exception:
        logger.exception("[Bookmarks] 获取书签失败")
        raise HTTPException(status_code=500, detail="Failed to fetch bookmarks")


@router.get("/category/{category_id}", response_model=List[BookmarkResponse])
async def get_bookmarks_by_category(
    category_id: int,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """获取分类下的书签"""
    try:
        bookmarks = await storage.get_bookmarks_by_category(category_id)
    except Exception:
        logger.exception(f"[Bookmarks] 获取分类书签失败 category_id={category_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch bookmarks")
    return [b for b in bookmarks if b.user_id == user_id]


@router.get("/section/{section_id}", response_model=List[BookmarkResponse])
async def get_bookmarks_by_section(
    section_id: int,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """获取分区下的书签"""
    try:
        bookmarks = await storage.get_bookmarks_by_section(section_id)
    except Exception:
        logger.exception(f"[Bookmarks] 获取分区书签失败 section_id={section_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch bookmarks")
    return [b for b in bookmarks if b.user_id == user_id]


async def _get_owned_bookmark(storage: IStorage, bookmark_id: int, user_id: int):
    """取书签，不存在或不属于当前用户时 404"""
    bookmark = await storage.get_bookmark_by_id(bookmark_id)
    if not bookmark or bookmark.user_id != user_id:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return bookmark


async def _check_references(
    storage: IStorage,
    user_id: int,
    category_id: Optional[int] = None,
    section_id: Optional[int] = None,
):
    """分类/分区必须存在且属于当前用户"""
    if category_id is not None:
        category = await storage.get_category_by_id(category_id)
        if not category or category.user_id != user_id:
            raise HTTPException(status_code=400, detail=f"Category {category_id} does not exist")
    if section_id is not None:
        section = await storage.get_section_by_id(section_id)
        if not section or section.user_id != user_id:
            raise HTTPException(status_code=400, detail=f"Section {section_id} does not exist")


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: int,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """获取单个书签"""
    try:
        return await _get_owned_bookmark(storage, bookmark_id, user_id)
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"[Bookmarks] 获取书签失败 id={bookmark_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch bookmark")


# ==================== 增删改 ====================

@router.post("", response_model=BookmarkResponse, status_code=status.HTTP_201_CREATED)
async def create_bookmark(
    bookmark_in: BookmarkCreate,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """创建书签"""
    try:
        await _check_references(storage, user_id, bookmark_in.category_id, bookmark_in.section_id)
        bookmark = await storage.create_bookmark({**bookmark_in.model_dump(), "user_id": user_id})
        await storage.commit()
    except HTTPException:
        raise
    except Exception:
        logger.exception("[Bookmarks] 创建书签失败")
        raise HTTPException(status_code=500, detail="Failed to create bookmark")

    logger.info(f"[Bookmarks] 创建书签 id={bookmark.id} url={bookmark.url}")
    return bookmark


@router.patch("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: int,
    bookmark_in: BookmarkUpdate,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """更新书签（只修改请求中出现的字段）"""
    changes = bookmark_in.changes()
    try:
        await _get_owned_bookmark(storage, bookmark_id, user_id)
        await _check_references(
            storage, user_id,
            category_id=changes.get("category_id"),
            section_id=changes.get("section_id"),
        )
        bookmark = await storage.update_bookmark(bookmark_id, changes)
        await storage.commit()
        return bookmark
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"[Bookmarks] 更新书签失败 id={bookmark_id}")
        raise HTTPException(status_code=500, detail="Failed to update bookmark")


@router.delete("/{bookmark_id}", response_model=MessageResponse)
async def delete_bookmark(
    bookmark_id: int,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """删除书签"""
    try:
        await _get_owned_bookmark(storage, bookmark_id, user_id)
        await storage.delete_bookmark(bookmark_id)
        await storage.commit()
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"[Bookmarks] 删除书签失败 id={bookmark_id}")
        raise HTTPException(status_code=500, detail="Failed to delete bookmark")

    return MessageResponse(message="Bookmark deleted successfully")


@router.post("/{bookmark_id}/visit", response_model=VisitResponse)
async def visit_bookmark(
    bookmark_id: int,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """记录一次访问，并触发成就重算"""
    try:
        await _get_owned_bookmark(storage, bookmark_id, user_id)
        bookmark = await storage.increment_bookmark_visit(bookmark_id)
        await storage.commit()
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"[Bookmarks] 记录访问失败 id={bookmark_id}")
        raise HTTPException(status_code=500, detail="Failed to record visit")

    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")

    return VisitResponse(message="Visit recorded", visit_count=bookmark.visit_count)
