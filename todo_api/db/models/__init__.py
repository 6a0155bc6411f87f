"""
模型统一导出：Alembic 自动发现需要导入所有模型
"""

from todo_api.db.models.base import Base
from todo_api.db.models.todo import Todo
from todo_api.db.models.user import User

__all__ = ["Base", "Todo", "User"]
