"""成就相关 Schema"""
from datetime import datetime
from typing import Optional

from .base import CamelModel


class AchievementResponse(CamelModel):
    """成就定义"""
    id: int
    name: str
    description: str
    icon: str
    type: str
    threshold: int
    reward: Optional[str] = None
    color: str


class UserAchievementResponse(CamelModel):
    """用户成就进度（合并成就定义）"""
    id: int
    user_id: int
    achievement_id: int
    unlocked_at: Optional[datetime] = None
    progress: int
    achievement: AchievementResponse

    @classmethod
    def from_pair(cls, user_achievement, achievement) -> "UserAchievementResponse":
        return cls(
            id=user_achievement.id,
            user_id=user_achievement.user_id,
            achievement_id=user_achievement.achievement_id,
            unlocked_at=user_achievement.unlocked_at,
            progress=user_achievement.progress,
            achievement=AchievementResponse.model_validate(achievement),
        )
