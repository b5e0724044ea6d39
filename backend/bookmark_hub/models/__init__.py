"""数据模型"""
from .user import User
from .bookmark import BookmarkCategory, Bookmark
from .section import Section
from .achievement import Achievement, AchievementType, UserAchievement

__all__ = [
    "User",
    "BookmarkCategory", "Bookmark",
    "Section",
    "Achievement", "AchievementType", "UserAchievement",
]
