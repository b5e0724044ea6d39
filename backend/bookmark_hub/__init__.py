"""Bookmark Hub 后端"""

__version__ = "1.0.0"
