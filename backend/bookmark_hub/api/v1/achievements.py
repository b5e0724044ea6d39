"""成就路由"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ...schemas import AchievementResponse, UserAchievementResponse
from ...storage import IStorage
from ..deps import get_storage, get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[UserAchievementResponse])
async def get_user_achievements(
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """获取当前用户的成就进度"""
    try:
        pairs = await storage.get_user_achievements(user_id)
    except Exception:
        logger.exception("[Achievements] 获取用户成就失败")
        raise HTTPException(status_code=500, detail="Failed to fetch achievements")
    return [UserAchievementResponse.from_pair(ua, achievement) for ua, achievement in pairs]


@router.get("/definitions", response_model=List[AchievementResponse])
async def get_achievement_definitions(storage: IStorage = Depends(get_storage)):
    """获取全部成就定义"""
    try:
        return await storage.get_achievements()
    except Exception:
        logger.exception("[Achievements] 获取成就定义失败")
        raise HTTPException(status_code=500, detail="Failed to fetch achievements")


@router.get("/check", response_model=List[UserAchievementResponse])
async def check_achievements(
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """按当前数据重算成就进度"""
    try:
        pairs = await storage.check_user_achievements(user_id)
        await storage.commit()
    except Exception:
        logger.exception("[Achievements] 重算成就失败")
        raise HTTPException(status_code=500, detail="Failed to check achievements")

    unlocked = sum(1 for ua, _ in pairs if ua.unlocked_at is not None)
    logger.info(f"[Achievements] 用户 {user_id} 已解锁 {unlocked}/{len(pairs)}")
    return [UserAchievementResponse.from_pair(ua, achievement) for ua, achievement in pairs]
