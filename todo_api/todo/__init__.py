"""
Todo 模块：按所属用户隔离的待办事项 CRUD

所有操作都必须传入 owner_id，不存在只按 Todo id 访问的入口。
"""

from todo_api.todo.schemas import TodoCreate, TodoOut, TodoPatch
from todo_api.todo.store import TodoStore

__all__ = ["TodoCreate", "TodoOut", "TodoPatch", "TodoStore"]
