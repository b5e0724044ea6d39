"""书签与分类模型"""
from sqlalchemy import Column, String, DateTime, Integer, Text, JSON, ForeignKey
from datetime import datetime

from ..database import Base


class BookmarkCategory(Base):
    """书签分类表"""
    __tablename__ = "bookmark_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    color = Column(String(20), default="#6366f1")
    icon = Column(String(50), default="folder")
    position = Column(Integer, default=0)


class Bookmark(Base):
    """书签表"""
    __tablename__ = "bookmarks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    url = Column(String(2000), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(Integer, ForeignKey("bookmark_categories.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    section_id = Column(Integer, ForeignKey("sections.id", ondelete="SET NULL"), nullable=True, index=True)
    position = Column(Integer, default=0)
    custom_settings = Column(JSON, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    last_visited = Column(DateTime, nullable=True)
    visit_count = Column(Integer, default=0, nullable=False)
