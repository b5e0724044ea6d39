"""用户相关 Schema"""
from pydantic import Field
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional

from .base import CamelModel, PartialUpdate


class UserCreate(CamelModel):
    """创建用户"""
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=100)
    email: Optional[str] = None
    theme: str = "light"
    settings: Dict[str, Any] = {}


class UserUpdate(PartialUpdate):
    """更新用户"""
    email: Optional[str] = None
    theme: Optional[str] = Field(None, min_length=1, max_length=50)
    settings: Optional[Dict[str, Any]] = None

    nullable_fields: ClassVar[frozenset] = frozenset({"email"})


class UserResponse(CamelModel):
    """用户响应（不含密码）"""
    id: int
    username: str
    email: Optional[str] = None
    theme: str
    settings: Dict[str, Any] = {}
    created_at: datetime
    last_login: Optional[datetime] = None
