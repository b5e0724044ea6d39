"""SQLAlchemy 存储实现"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

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


class SQLStorage(IStorage):
    """
    基于 AsyncSession 的存储实现

    会话的事务边界由调用方控制（一个请求一个事务），
    这里只做 flush，不做 commit。
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _next_position(self, model, user_id: int) -> int:
        result = await self.db.execute(
            select(func.max(model.position)).where(model.user_id == user_id)
        )
        current = result.scalar()
        return 0 if current is None else current + 1

    async def commit(self) -> None:
        await self.db.commit()

    async def _save(self, obj):
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    # ==================== 初始化 ====================

    async def seed_defaults(self, demo_user_id: int = 1, with_samples: bool = False) -> None:
        if await self.db.get(User, demo_user_id) is None and await self._demo_name_free(demo_user_id):
            self.db.add(User(
                id=demo_user_id,
                username=DEMO_USERNAME,
                password=hash_password(DEMO_PASSWORD),
                theme="light",
                settings={},
            ))
            await self.db.flush()
            logger.info(f"[Storage] 已创建演示用户 id={demo_user_id}")

        result = await self.db.execute(select(func.count()).select_from(Achievement))
        if result.scalar() == 0:
            for definition in DEFAULT_ACHIEVEMENTS:
                self.db.add(Achievement(**definition))
            await self.db.flush()
            logger.info(f"[Storage] 已写入 {len(DEFAULT_ACHIEVEMENTS)} 个默认成就")

        if with_samples and not await self.get_categories(demo_user_id):
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
        return await self.db.get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def create_user(self, data: Dict[str, Any]) -> User:
        user = User(
            username=data["username"],
            password=hash_password(data["password"]),
            email=data.get("email"),
            theme=data.get("theme") or "light",
            settings=data.get("settings") or {},
        )
        return await self._save(user)

    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[User]:
        user = await self.db.get(User, user_id)
        if not user:
            return None
        apply_changes(user, changes)
        return await self._save(user)

    # ==================== 分类 ====================

    async def get_categories(self, user_id: int) -> List[BookmarkCategory]:
        result = await self.db.execute(
            select(BookmarkCategory)
            .where(BookmarkCategory.user_id == user_id)
            .order_by(BookmarkCategory.position, BookmarkCategory.id)
        )
        return list(result.scalars().all())

    async def get_category_by_id(self, category_id: int) -> Optional[BookmarkCategory]:
        return await self.db.get(BookmarkCategory, category_id)

    async def create_category(self, data: Dict[str, Any]) -> BookmarkCategory:
        position = data.get("position")
        if position is None:
            position = await self._next_position(BookmarkCategory, data["user_id"])
        category = BookmarkCategory(
            name=data["name"],
            user_id=data["user_id"],
            color=data.get("color") or "#6366f1",
            icon=data.get("icon") or "folder",
            position=position,
        )
        return await self._save(category)

    async def update_category(self, category_id: int, changes: Dict[str, Any]) -> Optional[BookmarkCategory]:
        category = await self.db.get(BookmarkCategory, category_id)
        if not category:
            return None
        apply_changes(category, changes)
        return await self._save(category)

    async def delete_category(self, category_id: int) -> Optional[int]:
        category = await self.db.get(BookmarkCategory, category_id)
        if not category:
            return None
        result = await self.db.execute(
            delete(Bookmark).where(Bookmark.category_id == category_id)
        )
        await self.db.delete(category)
        await self.db.flush()
        return result.rowcount or 0

    # ==================== 书签 ====================

    async def get_bookmarks(self, user_id: int) -> List[Bookmark]:
        result = await self.db.execute(
            select(Bookmark)
            .where(Bookmark.user_id == user_id)
            .order_by(Bookmark.position, Bookmark.id)
        )
        return list(result.scalars().all())

    async def get_bookmarks_by_category(self, category_id: int) -> List[Bookmark]:
        result = await self.db.execute(
            select(Bookmark)
            .where(Bookmark.category_id == category_id)
            .order_by(Bookmark.position, Bookmark.id)
        )
        return list(result.scalars().all())

    async def get_bookmarks_by_section(self, section_id: int) -> List[Bookmark]:
        result = await self.db.execute(
            select(Bookmark)
            .where(Bookmark.section_id == section_id)
            .order_by(Bookmark.position, Bookmark.id)
        )
        return list(result.scalars().all())

    async def get_bookmark_by_id(self, bookmark_id: int) -> Optional[Bookmark]:
        return await self.db.get(Bookmark, bookmark_id)

    async def create_bookmark(self, data: Dict[str, Any]) -> Bookmark:
        bookmark = Bookmark(
            title=data["title"],
            url=data["url"],
            description=data.get("description"),
            category_id=data["category_id"],
            user_id=data["user_id"],
            section_id=data.get("section_id"),
            position=data.get("position") or 0,
            custom_settings=data.get("custom_settings") or {},
            visit_count=0,
        )
        return await self._save(bookmark)

    async def update_bookmark(self, bookmark_id: int, changes: Dict[str, Any]) -> Optional[Bookmark]:
        bookmark = await self.db.get(Bookmark, bookmark_id)
        if not bookmark:
            return None
        apply_changes(bookmark, changes)
        return await self._save(bookmark)

    async def delete_bookmark(self, bookmark_id: int) -> bool:
        bookmark = await self.db.get(Bookmark, bookmark_id)
        if not bookmark:
            return False
        await self.db.delete(bookmark)
        await self.db.flush()
        return True

    async def increment_bookmark_visit(self, bookmark_id: int) -> Optional[Bookmark]:
        # 单条 UPDATE 完成自增，避免读-改-写
        result = await self.db.execute(
            update(Bookmark)
            .where(Bookmark.id == bookmark_id)
            .values(visit_count=Bookmark.visit_count + 1, last_visited=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if not result.rowcount:
            return None

        result = await self.db.execute(
            select(Bookmark)
            .where(Bookmark.id == bookmark_id)
            .execution_options(populate_existing=True)
        )
        bookmark = result.scalar_one()
        await self.check_user_achievements(bookmark.user_id)
        return bookmark

    # ==================== 分区 ====================

    async def get_sections(self, user_id: int) -> List[Section]:
        result = await self.db.execute(
            select(Section)
            .where(Section.user_id == user_id)
            .order_by(Section.position, Section.id)
        )
        return list(result.scalars().all())

    async def get_section_by_id(self, section_id: int) -> Optional[Section]:
        return await self.db.get(Section, section_id)

    async def create_section(self, data: Dict[str, Any]) -> Section:
        position = data.get("position")
        if position is None:
            position = await self._next_position(Section, data["user_id"])
        section = Section(
            name=data["name"],
            user_id=data["user_id"],
            position=position,
            icon=data.get("icon") or "layout",
            color=data.get("color") or "#0ea5e9",
            is_default=bool(data.get("is_default")),
            settings=data.get("settings") or {},
        )
        return await self._save(section)

    async def update_section(self, section_id: int, changes: Dict[str, Any]) -> Optional[Section]:
        section = await self.db.get(Section, section_id)
        if not section:
            return None
        apply_changes(section, changes)
        return await self._save(section)

    async def delete_section(self, section_id: int) -> Optional[int]:
        section = await self.db.get(Section, section_id)
        if not section:
            return None
        result = await self.db.execute(
            update(Bookmark)
            .where(Bookmark.section_id == section_id)
            .values(section_id=None)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.delete(section)
        await self.db.flush()
        return result.rowcount or 0

    # ==================== 成就 ====================

    async def get_achievements(self) -> List[Achievement]:
        result = await self.db.execute(select(Achievement).order_by(Achievement.id))
        return list(result.scalars().all())

    async def get_user_achievements(self, user_id: int) -> List[Tuple[UserAchievement, Achievement]]:
        result = await self.db.execute(
            select(UserAchievement, Achievement)
            .join(Achievement, UserAchievement.achievement_id == Achievement.id)
            .where(UserAchievement.user_id == user_id)
            .order_by(UserAchievement.achievement_id)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def _collect_metrics(self, user_id: int) -> UserMetrics:
        bookmark_result = await self.db.execute(
            select(func.count(Bookmark.id), func.coalesce(func.sum(Bookmark.visit_count), 0))
            .where(Bookmark.user_id == user_id)
        )
        bookmark_count, visit_count = bookmark_result.one()
        category_result = await self.db.execute(
            select(func.count(BookmarkCategory.id)).where(BookmarkCategory.user_id == user_id)
        )
        return UserMetrics(
            bookmark_count=int(bookmark_count or 0),
            category_count=int(category_result.scalar() or 0),
            visit_count=int(visit_count or 0),
        )

    async def check_user_achievements(self, user_id: int) -> List[Tuple[UserAchievement, Achievement]]:
        metrics = await self._collect_metrics(user_id)
        achievements = await self.get_achievements()

        result = await self.db.execute(
            select(UserAchievement).where(UserAchievement.user_id == user_id)
        )
        existing = {ua.achievement_id: ua for ua in result.scalars().all()}
        now = datetime.utcnow()

        for achievement in achievements:
            progress = metrics.progress_for(achievement.type)
            user_achievement = existing.get(achievement.id)
            if user_achievement:
                apply_progress(user_achievement, progress, achievement.threshold, now)
            else:
                self.db.add(UserAchievement(
                    user_id=user_id,
                    achievement_id=achievement.id,
                    progress=progress,
                    unlocked_at=now if progress >= achievement.threshold else None,
                ))

        await self.db.flush()
        logger.debug(f"[Storage] 用户 {user_id} 成就已重算: {metrics}")
        return await self.get_user_achievements(user_id)
