"""书签与分类相关 Schema"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional

from .base import CamelModel, PartialUpdate


# ==================== 分类 ====================

class CategoryCreate(CamelModel):
    """创建分类"""
    name: str = Field(..., min_length=1, max_length=100)
    color: str = "#6366f1"
    icon: str = "folder"
    position: Optional[int] = Field(None, ge=0)


class CategoryUpdate(PartialUpdate):
    """更新分类"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None
    icon: Optional[str] = None
    position: Optional[int] = Field(None, ge=0)


class CategoryResponse(CamelModel):
    """分类响应"""
    id: int
    name: str
    user_id: int
    color: str
    icon: str
    position: int


class CategoryDeleteResponse(CamelModel):
    """删除分类响应"""
    message: str
    deleted_bookmarks_count: int


# ==================== 书签 ====================

class BookmarkCreate(CamelModel):
    """创建书签"""
    title: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=2000)
    description: Optional[str] = None
    category_id: int
    section_id: Optional[int] = None
    position: int = Field(0, ge=0)
    custom_settings: Dict[str, Any] = {}


class BookmarkUpdate(PartialUpdate):
    """更新书签"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    url: Optional[str] = Field(None, min_length=1, max_length=2000)
    description: Optional[str] = None
    category_id: Optional[int] = None
    section_id: Optional[int] = None
    position: Optional[int] = Field(None, ge=0)
    custom_settings: Optional[Dict[str, Any]] = None

    nullable_fields: ClassVar[frozenset] = frozenset({"description", "section_id"})


class BookmarkResponse(CamelModel):
    """书签响应"""
    id: int
    title: str
    url: str
    description: Optional[str] = None
    category_id: int
    user_id: int
    section_id: Optional[int] = None
    position: int
    custom_settings: Dict[str, Any] = {}
    created_at: datetime
    last_visited: Optional[datetime] = None
    visit_count: int


class VisitResponse(CamelModel):
    """访问计数响应"""
    message: str
    visit_count: int


class UrlMetaRequest(BaseModel):
    """URL Meta 请求"""
    url: str = Field(..., min_length=1, max_length=2000)


class UrlMetaResponse(BaseModel):
    """URL Meta 响应"""
    title: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    url: str
