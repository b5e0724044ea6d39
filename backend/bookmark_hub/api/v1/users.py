"""用户路由"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ...schemas import UserResponse, UserUpdate
from ...storage import IStorage
from ..deps import get_storage, get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """获取当前用户信息"""
    try:
        user = await storage.get_user(user_id)
    except Exception:
        logger.exception("[Users] 获取用户失败")
        raise HTTPException(status_code=500, detail="Failed to fetch user")

    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.patch("/me", response_model=UserResponse)
async def update_me(
    user_in: UserUpdate,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """更新当前用户的邮箱、主题、偏好设置"""
    try:
        user = await storage.update_user(user_id, user_in.changes())
        await storage.commit()
    except Exception:
        logger.exception("[Users] 更新用户失败")
        raise HTTPException(status_code=500, detail="Failed to update user")

    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
