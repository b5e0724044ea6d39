"""分区模型"""
from sqlalchemy import Column, String, Boolean, Integer, JSON, ForeignKey

from ..database import Base


class Section(Base):
    """分区表（与分类并行的另一种分组方式）"""
    __tablename__ = "sections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, default=0)
    icon = Column(String(50), default="layout")
    color = Column(String(20), default="#0ea5e9")
    is_default = Column(Boolean, default=False)
    settings = Column(JSON, default=dict)
