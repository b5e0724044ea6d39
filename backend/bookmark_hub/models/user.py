"""用户模型"""
from sqlalchemy import Column, String, DateTime, Integer, JSON
from datetime import datetime

from ..database import Base


class User(Base):
    """用户表"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # passlib 哈希
    email = Column(String(255), nullable=True)
    theme = Column(String(50), default="light")
    settings = Column(JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)
