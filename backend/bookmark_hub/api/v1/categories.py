"""书签分类路由"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas import CategoryCreate, CategoryUpdate, CategoryResponse, CategoryDeleteResponse
from ...storage import IStorage
from ..deps import get_storage, get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[CategoryResponse])
async def get_categories(
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """获取分类列表"""
    try:
        return await storage.get_categories(user_id)
    except Exception:
        logger.exception("[Categories] 获取分类失败")
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_in: CategoryCreate,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """创建分类"""
    try:
        category = await storage.create_category({**category_in.model_dump(), "user_id": user_id})
        await storage.commit()
    except Exception:
        logger.exception("[Categories] 创建分类失败")
        raise HTTPException(status_code=500, detail="Failed to create category")

    logger.info(f"[Categories] 创建分类 id={category.id} name={category.name!r}")
    return category


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """更新分类"""
    try:
        category = await storage.get_category_by_id(category_id)
        if not category or category.user_id != user_id:
            raise HTTPException(status_code=404, detail="Category not found")
        category = await storage.update_category(category_id, category_in.changes())
        await storage.commit()
        return category
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"[Categories] 更新分类失败 id={category_id}")
        raise HTTPException(status_code=500, detail="Failed to update category")


@router.delete("/{category_id}", response_model=CategoryDeleteResponse)
async def delete_category(
    category_id: int,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """删除分类（连同分类下的全部书签）"""
    try:
        category = await storage.get_category_by_id(category_id)
        if not category or category.user_id != user_id:
            raise HTTPException(status_code=404, detail="Category not found")
        deleted = await storage.delete_category(category_id)
        await storage.commit()
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"[Categories] 删除分类失败 id={category_id}")
        raise HTTPException(status_code=500, detail="Failed to delete category")

    logger.info(f"[Categories] 删除分类 id={category_id}，连带删除书签 {deleted} 个")
    return CategoryDeleteResponse(
        message="Category deleted successfully",
        deleted_bookmarks_count=deleted or 0,
    )
