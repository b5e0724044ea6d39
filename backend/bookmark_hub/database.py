"""数据库配置"""
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import event

from .config import settings


class Base(DeclarativeBase):
    """模型基类"""
    pass


def set_sqlite_pragma(dbapi_connection, connection_record):
    """SQLite 性能优化"""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA temp_store=MEMORY")
    cursor.close()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """创建异步引擎，SQLite 连接额外注册 PRAGMA"""
    engine = create_async_engine(url, echo=echo, future=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", set_sqlite_pragma)
    return engine


@lru_cache()
def get_engine() -> AsyncEngine:
    """获取全局引擎（首次调用时创建）"""
    url = (settings.DATABASE_URL or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL environment variable is not set")
    return build_engine(url, echo=settings.DEBUG)


@lru_cache()
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """异步会话工厂"""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db(engine: AsyncEngine = None):
    """初始化数据库表"""
    # 导入模型以注册到 metadata
    from . import models  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def session_scope(factory: async_sessionmaker[AsyncSession] = None) -> AsyncIterator[AsyncSession]:
    """一个会话一个事务：正常退出提交，异常回滚"""
    factory = factory or get_sessionmaker()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
