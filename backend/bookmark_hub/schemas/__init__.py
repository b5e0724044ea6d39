"""Pydantic Schemas"""
from .base import CamelModel, PartialUpdate, MessageResponse
from .user import UserCreate, UserUpdate, UserResponse
from .bookmark import (
    CategoryCreate, CategoryUpdate, CategoryResponse, CategoryDeleteResponse,
    BookmarkCreate, BookmarkUpdate, BookmarkResponse, VisitResponse,
    UrlMetaRequest, UrlMetaResponse,
)
from .section import SectionCreate, SectionUpdate, SectionResponse, SectionDeleteResponse
from .achievement import AchievementResponse, UserAchievementResponse

__all__ = [
    "CamelModel", "PartialUpdate", "MessageResponse",
    "UserCreate", "UserUpdate", "UserResponse",
    "CategoryCreate", "CategoryUpdate", "CategoryResponse", "CategoryDeleteResponse",
    "BookmarkCreate", "BookmarkUpdate", "BookmarkResponse", "VisitResponse",
    "UrlMetaRequest", "UrlMetaResponse",
    "SectionCreate", "SectionUpdate", "SectionResponse", "SectionDeleteResponse",
    "AchievementResponse", "UserAchievementResponse",
]
