"""
存储接口定义

IStorage 是书签、分类、分区、成就的持久化契约，
SQLStorage（SQLAlchemy）与 MemStorage（进程内存）各自实现。

约定：
- 查询不到时返回 None 或空列表，不抛异常，由 API 层转换为 404
- 所有需要归属用户的操作都显式传入 user_id
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..models import (
    User, BookmarkCategory, Bookmark, Section,
    Achievement, AchievementType, UserAchievement,
)

logger = logging.getLogger(__name__)


# 默认成就目录（表为空时写入）
DEFAULT_ACHIEVEMENTS: List[Dict[str, Any]] = [
    {
        "name": "First Bookmark",
        "description": "Save your first bookmark",
        "icon": "bookmark",
        "type": AchievementType.BOOKMARK_COUNT.value,
        "threshold": 1,
        "reward": "Unlocks custom category colors",
        "color": "#22c55e",
    },
    {
        "name": "Collector",
        "description": "Save 10 bookmarks",
        "icon": "library",
        "type": AchievementType.BOOKMARK_COUNT.value,
        "threshold": 10,
        "reward": "Unlocks the ocean theme",
        "color": "#0ea5e9",
    },
    {
        "name": "Librarian",
        "description": "Save 50 bookmarks",
        "icon": "book-open",
        "type": AchievementType.BOOKMARK_COUNT.value,
        "threshold": 50,
        "reward": None,
        "color": "#6366f1",
    },
    {
        "name": "Organizer",
        "description": "Create your first category",
        "icon": "folder-plus",
        "type": AchievementType.CATEGORY_COUNT.value,
        "threshold": 1,
        "reward": None,
        "color": "#f59e0b",
    },
    {
        "name": "Curator",
        "description": "Create 5 categories",
        "icon": "folders",
        "type": AchievementType.CATEGORY_COUNT.value,
        "threshold": 5,
        "reward": "Unlocks custom category icons",
        "color": "#ec4899",
    },
    {
        "name": "Explorer",
        "description": "Open bookmarks 10 times",
        "icon": "compass",
        "type": AchievementType.VISIT_COUNT.value,
        "threshold": 10,
        "reward": None,
        "color": "#14b8a6",
    },
    {
        "name": "Regular",
        "description": "Open bookmarks 100 times",
        "icon": "flame",
        "type": AchievementType.VISIT_COUNT.value,
        "threshold": 100,
        "reward": "Unlocks the particle background",
        "color": "#ef4444",
    },
]

DEMO_USERNAME = "demo"
DEMO_PASSWORD = "password"

# 演示数据（SEED_SAMPLE_DATA=true 时写入）
SAMPLE_CATEGORIES = ["AI Tools", "Productivity", "Social Media", "Design Tools"]
SAMPLE_BOOKMARKS = [
    # (标题, URL, 描述, 分类下标)
    ("ElevenLabs", "https://elevenlabs.io/app/home", "AI voice synthesis", 0),
    ("ChatGPT", "https://chat.openai.com", "AI chat platform", 0),
    ("Google Bard", "https://bard.google.com", "Google's AI assistant", 0),
    ("Notion", "https://notion.so", "All-in-one workspace", 1),
    ("Trello", "https://trello.com", "Task management", 1),
]


@dataclass
class UserMetrics:
    """成就统计口径"""
    bookmark_count: int = 0
    category_count: int = 0
    visit_count: int = 0

    def progress_for(self, achievement_type: str) -> int:
        if achievement_type == AchievementType.BOOKMARK_COUNT.value:
            return self.bookmark_count
        if achievement_type == AchievementType.CATEGORY_COUNT.value:
            return self.category_count
        if achievement_type == AchievementType.VISIT_COUNT.value:
            return self.visit_count
        return 0


def apply_progress(
    user_achievement: UserAchievement,
    progress: int,
    threshold: int,
    now: datetime,
) -> bool:
    """
    把新进度写入已有记录

    进度只升不降；首次达到阈值时记录 unlocked_at，之后不再清除。
    返回记录是否发生变化。
    """
    changed = False
    if progress > (user_achievement.progress or 0):
        user_achievement.progress = progress
        changed = True
    if user_achievement.unlocked_at is None and user_achievement.progress >= threshold:
        user_achievement.unlocked_at = now
        changed = True
    return changed


# 不允许通过 changes 修改的字段
PROTECTED_FIELDS = {"id", "user_id", "created_at", "visit_count", "last_visited", "password"}


def apply_changes(obj, changes: Dict[str, Any]):
    """局部更新：跳过受保护字段和模型上不存在的字段"""
    for key, value in changes.items():
        if key in PROTECTED_FIELDS or not hasattr(obj, key):
            continue
        setattr(obj, key, value)


class IStorage(ABC):
    """持久化服务接口"""

    async def commit(self) -> None:
        """提交本次请求的写入；内存实现无事可做"""

    async def _demo_name_free(self, demo_user_id: int) -> bool:
        """演示用户名已被其他 id 占用时不再插入，避免唯一约束冲突"""
        owner = await self.get_user_by_username(DEMO_USERNAME)
        if owner is None:
            return True
        logger.warning(f"[Storage] 用户名 {DEMO_USERNAME!r} 已属于 id={owner.id}，跳过创建演示用户 id={demo_user_id}")
        return False

    # ==================== 初始化 ====================

    @abstractmethod
    async def seed_defaults(self, demo_user_id: int = 1, with_samples: bool = False) -> None:
        """确保演示用户与默认成就存在，可选写入演示书签"""

    # ==================== 用户 ====================

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    async def create_user(self, data: Dict[str, Any]) -> User:
        """创建用户，data["password"] 为明文，存储前哈希"""

    @abstractmethod
    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[User]: ...

    # ==================== 分类 ====================

    @abstractmethod
    async def get_categories(self, user_id: int) -> List[BookmarkCategory]: ...

    @abstractmethod
    async def get_category_by_id(self, category_id: int) -> Optional[BookmarkCategory]: ...

    @abstractmethod
    async def create_category(self, data: Dict[str, Any]) -> BookmarkCategory: ...

    @abstractmethod
    async def update_category(self, category_id: int, changes: Dict[str, Any]) -> Optional[BookmarkCategory]: ...

    @abstractmethod
    async def delete_category(self, category_id: int) -> Optional[int]:
        """删除分类及其下所有书签，返回删除的书签数；分类不存在返回 None"""

    # ==================== 书签 ====================

    @abstractmethod
    async def get_bookmarks(self, user_id: int) -> List[Bookmark]: ...

    @abstractmethod
    async def get_bookmarks_by_category(self, category_id: int) -> List[Bookmark]: ...

    @abstractmethod
    async def get_bookmarks_by_section(self, section_id: int) -> List[Bookmark]: ...

    @abstractmethod
    async def get_bookmark_by_id(self, bookmark_id: int) -> Optional[Bookmark]: ...

    @abstractmethod
    async def create_bookmark(self, data: Dict[str, Any]) -> Bookmark: ...

    @abstractmethod
    async def update_bookmark(self, bookmark_id: int, changes: Dict[str, Any]) -> Optional[Bookmark]: ...

    @abstractmethod
    async def delete_bookmark(self, bookmark_id: int) -> bool: ...

    @abstractmethod
    async def increment_bookmark_visit(self, bookmark_id: int) -> Optional[Bookmark]:
        """访问次数 +1 并刷新 last_visited，随后重算所属用户的成就"""

    # ==================== 分区 ====================

    @abstractmethod
    async def get_sections(self, user_id: int) -> List[Section]: ...

    @abstractmethod
    async def get_section_by_id(self, section_id: int) -> Optional[Section]: ...

    @abstractmethod
    async def create_section(self, data: Dict[str, Any]) -> Section: ...

    @abstractmethod
    async def update_section(self, section_id: int, changes: Dict[str, Any]) -> Optional[Section]: ...

    @abstractmethod
    async def delete_section(self, section_id: int) -> Optional[int]:
        """删除分区，引用它的书签 section_id 置空；返回被置空的书签数，分区不存在返回 None"""

    # ==================== 成就 ====================

    @abstractmethod
    async def get_achievements(self) -> List[Achievement]: ...

    @abstractmethod
    async def get_user_achievements(self, user_id: int) -> List[Tuple[UserAchievement, Achievement]]: ...

    @abstractmethod
    async def check_user_achievements(self, user_id: int) -> List[Tuple[UserAchievement, Achievement]]:
        """按当前统计重算并写入用户成就进度，返回合并后的列表"""
