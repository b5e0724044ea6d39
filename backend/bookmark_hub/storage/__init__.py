"""持久化服务"""
from .base import IStorage, UserMetrics, apply_progress, DEFAULT_ACHIEVEMENTS
from .memory import MemStorage
from .sql import SQLStorage

__all__ = [
    "IStorage", "UserMetrics", "apply_progress", "DEFAULT_ACHIEVEMENTS",
    "MemStorage", "SQLStorage",
]
