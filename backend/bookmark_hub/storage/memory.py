"""进程内存存储（本地开发 / 测试用）"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..models import (
    User, BookmarkCategory, Bookmark, Section,
    Achievement, UserAchievement,
)
from ..utils.security import hash_password
from .base import (
    IStorage, UserMetrics, apply_progress, apply_changes,
    DEFAULT_ACHIEVEMENTS, DEMO_USERNAME, DEMO_PASSWORD,
    SAMPLE_CATEGORIES, SAMPLE_BOOKMARKS,
)

logger = logging.getLogger(__name__)


def _sort_key(obj):
    return (obj.position or 0, obj.id)


class MemStorage(IStorage):
    """
    基于字典的存储实现

    每个操作在两次 await 之间不会让出事件循环，
    因此多步操作（删除分类 + 删除书签）对其他请求是原子的。
    """

    def __init__(self):
        self.users: Dict[int, User] = {}
        self.categories: Dict[int, BookmarkCategory] = {}
        self.bookmarks: Dict[int, Bookmark] = {}
        self.sections: Dict[int, Section] = {}
        self.achievements: Dict[int, Achievement] = {}
        self.user_achievements: Dict[int, UserAchievement] = {}
        self._next_ids: Dict[str, int] = {}

    def _next_id(self, table: str) -> int:
        value = self._next_ids.get(table, 1)
        self._next_ids[table] = value + 1
        return value

    def _next_position(self, rows, user_id: int) -> int:
        positions = [row.position or 0 for row in rows if row.user_id == user_id]
        return max(positions) + 1 if positions else 0

    # ==================== 初始化 ====================

    async def seed_defaults(self, demo_user_id: int = 1, with_samples: bool = False) -> None:
        if demo_user_id not in self.users and await self._demo_name_free(demo_user_id):
            self.users[demo_user_id] = User(
                id=demo_user_id,
                username=DEMO_USERNAME,
                password=hash_password(DEMO_PASSWORD),
                email=None,
                theme="light",
                settings={},
                created_at=datetime.utcnow(),
                last_login=None,
            )
            self._next_ids["users"] = max(self._next_ids.get("users", 1), demo_user_id + 1)
            logger.info(f"[Storage] 已创建演示用户 id={demo_user_id}")

        if not self.achievements:
            for definition in DEFAULT_ACHIEVEMENTS:
                achievement_id = self._next_id("achievements")
                self.achievements[achievement_id] = Achievement(id=achievement_id, **definition)
            logger.info(f"[Storage] 已写入 {len(DEFAULT_ACHIEVEMENTS)} 个默认成就")

        if with_samples and not self.categories:
            category_ids = []
            for name in SAMPLE_CATEGORIES:
                category = await self.create_category({"name": name, "user_id": demo_user_id})
                category_ids.append(category.id)
            for title, url, description, index in SAMPLE_BOOKMARKS:
                await self.create_bookmark({
                    "title": title,
                    "url": url,
                    "description": description,
                    "category_id": category_ids[index],
                    "user_id": demo_user_id,
                })
            logger.info("[Storage] 已写入演示书签")

    # ==================== 用户 ====================

    async def get_user(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        for user in self.users.values():
            if user.username == username:
                return user
        return None

    async def create_user(self, data: Dict[str, Any]) -> User:
        user_id = self._next_id("users")
        user = User(
            id=user_id,
            username=data["username"],
            password=hash_password(data["password"]),
            email=data.get("email"),
            theme=data.get("theme") or "light",
            settings=data.get("settings") or {},
            created_at=datetime.utcnow(),
            last_login=None,
        )
        self.users[user_id] = user
        return user

    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[User]:
        user = self.users.get(user_id)
        if not user:
            return None
        apply_changes(user, changes)
        return user

    # ==================== 分类 ====================

    async def get_categories(self, user_id: int) -> List[BookmarkCategory]:
        rows = [c for c in self.categories.values() if c.user_id == user_id]
        return sorted(rows, key=_sort_key)

    async def get_category_by_id(self, category_id: int) -> Optional[BookmarkCategory]:
        return self.categories.get(category_id)

    async def create_category(self, data: Dict[str, Any]) -> BookmarkCategory:
        position = data.get("position")
        if position is None:
            position = self._next_position(self.categories.values(), data["user_id"])
        category_id = self._next_id("categories")
        category = BookmarkCategory(
            id=category_id,
            name=data["name"],
            user_id=data["user_id"],
            color=data.get("color") or "#6366f1",
            icon=data.get("icon") or "folder",
            position=position,
        )
        self.categories[category_id] = category
        return category

    async def update_category(self, category_id: int, changes: Dict[str, Any]) -> Optional[BookmarkCategory]:
        category = self.categories.get(category_id)
        if not category:
            return None
        apply_changes(category, changes)
        return category

    async def delete_category(self, category_id: int) -> Optional[int]:
        if category_id not in self.categories:
            return None
        doomed = [bid for bid, b in self.bookmarks.items() if b.category_id == category_id]
        for bookmark_id in doomed:
            del self.bookmarks[bookmark_id]
        del self.categories[category_id]
        return len(doomed)

    # ==================== 书签 ====================

    async def get_bookmarks(self, user_id: int) -> List[Bookmark]:
        rows = [b for b in self.bookmarks.values() if b.user_id == user_id]
        return sorted(rows, key=_sort_key)

    async def get_bookmarks_by_category(self, category_id: int) -> List[Bookmark]:
        rows = [b for b in self.bookmarks.values() if b.category_id == category_id]
        return sorted(rows, key=_sort_key)

    async def get_bookmarks_by_section(self, section_id: int) -> List[Bookmark]:
        rows = [b for b in self.bookmarks.values() if b.section_id == section_id]
        return sorted(rows, key=_sort_key)

    async def get_bookmark_by_id(self, bookmark_id: int) -> Optional[Bookmark]:
        return self.bookmarks.get(bookmark_id)

    async def create_bookmark(self, data: Dict[str, Any]) -> Bookmark:
        bookmark_id = self._next_id("bookmarks")
        bookmark = Bookmark(
            id=bookmark_id,
            title=data["title"],
            url=data["url"],
            description=data.get("description"),
            category_id=data["category_id"],
            user_id=data["user_id"],
            section_id=data.get("section_id"),
            position=data.get("position") or 0,
            custom_settings=data.get("custom_settings") or {},
            created_at=datetime.utcnow(),
            last_visited=None,
            visit_count=0,
        )
        self.bookmarks[bookmark_id] = bookmark
        return bookmark

    async def update_bookmark(self, bookmark_id: int, changes: Dict[str, Any]) -> Optional[Bookmark]:
        bookmark = self.bookmarks.get(bookmark_id)
        if not bookmark:
            return None
        apply_changes(bookmark, changes)
        return bookmark

    async def delete_bookmark(self, bookmark_id: int) -> bool:
        return self.bookmarks.pop(bookmark_id, None) is not None

    async def increment_bookmark_visit(self, bookmark_id: int) -> Optional[Bookmark]:
        bookmark = self.bookmarks.get(bookmark_id)
        if not bookmark:
            return None
        bookmark.visit_count = (bookmark.visit_count or 0) + 1
        bookmark.last_visited = datetime.utcnow()
        await self.check_user_achievements(bookmark.user_id)
        return bookmark

    # ==================== 分区 ====================

    async def get_sections(self, user_id: int) -> List[Section]:
        rows = [s for s in self.sections.values() if s.user_id == user_id]
        return sorted(rows, key=_sort_key)

    async def get_section_by_id(self, section_id: int) -> Optional[Section]:
        return self.sections.get(section_id)

    async def create_section(self, data: Dict[str, Any]) -> Section:
        position = data.get("position")
        if position is None:
            position = self._next_position(self.sections.values(), data["user_id"])
        section_id = self._next_id("sections")
        section = Section(
            id=section_id,
            name=data["name"],
            user_id=data["user_id"],
            position=position,
            icon=data.get("icon") or "layout",
            color=data.get("color") or "#0ea5e9",
            is_default=bool(data.get("is_default")),
            settings=data.get("settings") or {},
        )
        self.sections[section_id] = section
        return section

    async def update_section(self, section_id: int, changes: Dict[str, Any]) -> Optional[Section]:
        section = self.sections.get(section_id)
        if not section:
            return None
        apply_changes(section, changes)
        return section

    async def delete_section(self, section_id: int) -> Optional[int]:
        if section_id not in self.sections:
            return None
        detached = 0
        for bookmark in self.bookmarks.values():
            if bookmark.section_id == section_id:
                bookmark.section_id = None
                detached += 1
        del self.sections[section_id]
        return detached

    # ==================== 成就 ====================

    async def get_achievements(self) -> List[Achievement]:
        return sorted(self.achievements.values(), key=lambda a: a.id)

    async def get_user_achievements(self, user_id: int) -> List[Tuple[UserAchievement, Achievement]]:
        pairs = []
        for user_achievement in sorted(self.user_achievements.values(), key=lambda ua: ua.achievement_id):
            if user_achievement.user_id != user_id:
                continue
            achievement = self.achievements.get(user_achievement.achievement_id)
            if achievement:
                pairs.append((user_achievement, achievement))
        return pairs

    def _find_user_achievement(self, user_id: int, achievement_id: int) -> Optional[UserAchievement]:
        for user_achievement in self.user_achievements.values():
            if user_achievement.user_id == user_id and user_achievement.achievement_id == achievement_id:
                return user_achievement
        return None

    async def check_user_achievements(self, user_id: int) -> List[Tuple[UserAchievement, Achievement]]:
        owned = [b for b in self.bookmarks.values() if b.user_id == user_id]
        metrics = UserMetrics(
            bookmark_count=len(owned),
            category_count=sum(1 for c in self.categories.values() if c.user_id == user_id),
            visit_count=sum(b.visit_count or 0 for b in owned),
        )
        now = datetime.utcnow()

        for achievement in self.achievements.values():
            progress = metrics.progress_for(achievement.type)
            existing = self._find_user_achievement(user_id, achievement.id)
            if existing:
                apply_progress(existing, progress, achievement.threshold, now)
            else:
                record_id = self._next_id("user_achievements")
                self.user_achievements[record_id] = UserAchievement(
                    id=record_id,
                    user_id=user_id,
                    achievement_id=achievement.id,
                    progress=progress,
                    unlocked_at=now if progress >= achievement.threshold else None,
                )

        return await self.get_user_achievements(user_id)
