"""
测试夹具：两种存储后端，以及跑在内存存储上的 TestClient。
"""
from __future__ import annotations

import os

# 应用配置在导入时读取，先固定测试环境
os.environ["STORAGE_BACKEND"] = "memory"
os.environ.pop("LOG_FILE", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bookmark_hub.api import deps
from bookmark_hub.database import build_engine, init_db
from bookmark_hub.main import app
from bookmark_hub.storage import MemStorage, SQLStorage
from bookmark_hub.utils import clear_caches


@pytest.fixture()
async def sql_engine(tmp_path):
    """临时 SQLite 文件，测试结束后释放连接"""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(sql_engine):
    return async_sessionmaker(sql_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture(params=["memory", "sql"])
async def storage(request, tmp_path):
    """同一组契约测试跑在两种后端上"""
    if request.param == "memory":
        mem = MemStorage()
        await mem.seed_defaults(demo_user_id=1)
        yield mem
        return

    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'contract.db'}")
    await init_db(engine)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        sql = SQLStorage(session)
        await sql.seed_defaults(demo_user_id=1)
        yield sql
        await session.rollback()
    await engine.dispose()


@pytest.fixture()
def client(monkeypatch):
    """每个测试一份全新的内存存储，由应用 lifespan 写入演示用户和默认成就"""
    monkeypatch.setattr(deps, "_memory_storage", None)
    clear_caches()
    with TestClient(app) as test_client:
        yield test_client
    clear_caches()


@pytest.fixture()
def mem_storage(client) -> MemStorage:
    return deps.get_memory_storage()
