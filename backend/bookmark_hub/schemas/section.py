"""分区相关 Schema"""
from pydantic import Field
from typing import Optional, Dict, Any

from .base import CamelModel, PartialUpdate


class SectionCreate(CamelModel):
    """创建分区"""
    name: str = Field(..., min_length=1, max_length=100)
    position: Optional[int] = Field(None, ge=0)
    icon: str = "layout"
    color: str = "#0ea5e9"
    is_default: bool = False
    settings: Dict[str, Any] = {}


class SectionUpdate(PartialUpdate):
    """更新分区"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    position: Optional[int] = Field(None, ge=0)
    icon: Optional[str] = None
    color: Optional[str] = None
    is_default: Optional[bool] = None
    settings: Optional[Dict[str, Any]] = None


class SectionResponse(CamelModel):
    """分区响应"""
    id: int
    name: str
    user_id: int
    position: int
    icon: str
    color: str
    is_default: bool
    settings: Dict[str, Any] = {}


class SectionDeleteResponse(CamelModel):
    """删除分区响应"""
    message: str
    updated_bookmarks_count: int
