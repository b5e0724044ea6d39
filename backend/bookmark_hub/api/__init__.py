"""API 路由"""
from fastapi import APIRouter
from .v1 import categories, bookmarks, sections, achievements, users, proxy

api_router = APIRouter()

# 注册路由
api_router.include_router(categories.router, prefix="/categories", tags=["分类"])
api_router.include_router(bookmarks.router, prefix="/bookmarks", tags=["书签"])
api_router.include_router(sections.router, prefix="/sections", tags=["分区"])
api_router.include_router(achievements.router, prefix="/achievements", tags=["成就"])
api_router.include_router(users.router, prefix="/users", tags=["用户"])
api_router.include_router(proxy.router, tags=["代理"])
