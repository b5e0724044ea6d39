"""分区路由"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas import SectionCreate, SectionUpdate, SectionResponse, SectionDeleteResponse
from ...storage import IStorage
from ..deps import get_storage, get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_owned_section(storage: IStorage, section_id: int, user_id: int):
    section = await storage.get_section_by_id(section_id)
    if not section or section.user_id != user_id:
        raise HTTPException(status_code=404, detail="Section not found")
    return section


@router.get("", response_model=List[SectionResponse])
async def get_sections(
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """获取分区列表"""
    try:
        return await storage.get_sections(user_id)
    except Exception:
        logger.exception("[Sections] 获取分区失败")
        raise HTTPException(status_code=500, detail="Failed to fetch sections")


@router.post("", response_model=SectionResponse, status_code=status.HTTP_201_CREATED)
async def create_section(
    section_in: SectionCreate,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """创建分区"""
    try:
        section = await storage.create_section({**section_in.model_dump(), "user_id": user_id})
        await storage.commit()
        return section
    except Exception:
        logger.exception("[Sections] 创建分区失败")
        raise HTTPException(status_code=500, detail="Failed to create section")


@router.patch("/{section_id}", response_model=SectionResponse)
async def update_section(
    section_id: int,
    section_in: SectionUpdate,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """更新分区"""
    try:
        await _get_owned_section(storage, section_id, user_id)
        section = await storage.update_section(section_id, section_in.changes())
        await storage.commit()
        return section
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"[Sections] 更新分区失败 id={section_id}")
        raise HTTPException(status_code=500, detail="Failed to update section")


@router.delete("/{section_id}", response_model=SectionDeleteResponse)
async def delete_section(
    section_id: int,
    user_id: int = Depends(get_current_user_id),
    storage: IStorage = Depends(get_storage)
):
    """删除分区，分区内的书签保留，只清空其 sectionId"""
    try:
        await _get_owned_section(storage, section_id, user_id)
        detached = await storage.delete_section(section_id)
        await storage.commit()
    except HTTPException:
        raise
    except Exception:
        logger.exception(f"[Sections] 删除分区失败 id={section_id}")
        raise HTTPException(status_code=500, detail="Failed to delete section")

    logger.info(f"[Sections] 删除分区 id={section_id}，解除关联书签 {detached} 个")
    return SectionDeleteResponse(
        message="Section deleted successfully",
        updated_bookmarks_count=detached or 0,
    )
