"""FastAPI 应用入口"""
import logging
import logging.config

from .config import settings


def build_logging_config() -> dict:
    """控制台输出，设置了 LOG_FILE 时同时写文件"""
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    }
    if settings.LOG_FILE:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "standard",
            "filename": settings.LOG_FILE,
            "mode": "a",
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": "%(asctime)s %(levelname)s:%(name)s:%(message)s"}
        },
        "handlers": handlers,
        "root": {
            "level": settings.LOG_LEVEL,
            "handlers": list(handlers),
        },
        "loggers": {
            "bookmark_hub": {"level": settings.LOG_LEVEL},
            "httpx": {"level": "WARNING"},
        },
    }


logging.config.dictConfig(build_logging_config())

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from .database import init_db, get_engine, session_scope
from .storage import SQLStorage
from .api import api_router
from .api.deps import get_memory_storage
from .api.errors import register_exception_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时
    if settings.STORAGE_BACKEND == "memory":
        await get_memory_storage().seed_defaults(settings.DEMO_USER_ID, settings.SEED_SAMPLE_DATA)
        logger.info("使用内存存储（重启后数据丢失）")
    else:
        # 未配置 DATABASE_URL 时这里抛 RuntimeError，启动失败
        await init_db()
        async with session_scope() as session:
            await SQLStorage(session).seed_defaults(settings.DEMO_USER_ID, settings.SEED_SAMPLE_DATA)
        logger.info("数据库初始化完成")

    logger.info(f"🚀 {settings.APP_NAME} v{settings.APP_VERSION} 启动成功")
    yield
    # 关闭时
    if settings.STORAGE_BACKEND == "sql":
        await get_engine().dispose()
    logger.info("👋 应用关闭完成")


# 创建应用
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="个人书签管理 API",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# 注册路由
app.include_router(api_router, prefix="/api")


# 健康检查
@app.get("/health", tags=["系统"], summary="健康检查")
async def health_check():
    """检查服务运行状态"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "storage": settings.STORAGE_BACKEND,
    }


# 根路由
@app.get("/", tags=["系统"], summary="欢迎页")
async def root():
    """返回 API 基本信息"""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/api/docs"
    }
