"""路由依赖"""
from typing import AsyncIterator, Optional

from ..config import settings
from ..database import session_scope
from ..storage import IStorage, MemStorage, SQLStorage

_memory_storage: Optional[MemStorage] = None


def get_memory_storage() -> MemStorage:
    """进程级内存存储单例"""
    global _memory_storage
    if _memory_storage is None:
        _memory_storage = MemStorage()
    return _memory_storage


async def get_storage() -> AsyncIterator[IStorage]:
    """
    按 STORAGE_BACKEND 提供存储

    sql 后端每个请求一个会话、一个事务：处理函数抛异常时整体回滚，
    删除分类、访问计数 + 成就重算这类多步操作因此是原子的。

    依赖的收尾代码在响应发出之后才执行，写操作必须在处理函数里
    调用 storage.commit()，提交失败才能以 500 返回给客户端。
    """
    if settings.STORAGE_BACKEND == "memory":
        yield get_memory_storage()
        return

    async with session_scope() as session:
        yield SQLStorage(session)


async def get_current_user_id() -> int:
    """当前用户 ID（认证接入前固定为演示用户）"""
    return settings.DEMO_USER_ID
