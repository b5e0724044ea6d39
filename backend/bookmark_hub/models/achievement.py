"""成就模型"""
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, UniqueConstraint
import enum

from ..database import Base


class AchievementType(str, enum.Enum):
    """成就进度的统计口径"""
    BOOKMARK_COUNT = "bookmark_count"
    CATEGORY_COUNT = "category_count"
    VISIT_COUNT = "visit_count"


class Achievement(Base):
    """成就定义表（静态数据）"""
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    icon = Column(String(50), default="trophy")
    type = Column(String(30), nullable=False)  # AchievementType
    threshold = Column(Integer, nullable=False)
    reward = Column(String(255), nullable=True)
    color = Column(String(20), default="#f59e0b")


class UserAchievement(Base):
    """用户成就进度表"""
    __tablename__ = "user_achievements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    achievement_id = Column(Integer, ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False)
    unlocked_at = Column(DateTime, nullable=True)
    progress = Column(Integer, default=0, nullable=False)

    # 每个用户每个成就只有一条进度
    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )
