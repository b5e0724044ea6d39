"""应用配置"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional, Literal
from pathlib import Path

# 项目根目录: backend/bookmark_hub/config.py -> ../../
_current_file = Path(__file__).resolve()
_backend_dir = _current_file.parent.parent  # backend 目录
_project_root = _backend_dir.parent  # 项目根目录
_env_file = _project_root / ".env" if (_project_root / ".env").exists() else None


class Settings(BaseSettings):
    """应用设置"""
    # 应用
    APP_NAME: str = "Bookmark Hub"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # 存储后端: sql 使用 DATABASE_URL，memory 使用进程内存（开发/测试）
    STORAGE_BACKEND: Literal["sql", "memory"] = "sql"
    # 数据库连接串，sql 后端必填，如 sqlite+aiosqlite:///./data/bookmarks.db
    DATABASE_URL: Optional[str] = None
    SEED_SAMPLE_DATA: bool = False

    # 演示用户（尚未接入认证）
    DEMO_USER_ID: int = 1

    # 日志
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # 缓存
    CACHE_TTL: int = 300  # 5 分钟
    CACHE_MAX_SIZE: int = 500

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost",
        "http://localhost:5000",
        "http://localhost:5173",
    ]

    # iframe 代理
    PROXY_TIMEOUT: float = 10.0
    PROXY_MAX_REDIRECTS: int = 5
    PROXY_MAX_RESPONSE_SIZE: int = 5 * 1024 * 1024  # 5MB
    PROXY_BLOCK_PRIVATE_NETWORKS: bool = True
    PROXY_ALLOWED_HOSTS: list[str] = []  # 为空表示不限制公网主机

    # 额外的禁止嵌入域名
    EMBED_DENYLIST: list[str] = []

    class Config:
        env_file = str(_env_file) if _env_file else ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """获取配置单例"""
    return Settings()


settings = get_settings()
