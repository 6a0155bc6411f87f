"""
User 模块：用户注册、凭据校验与会话 Token 生命周期
"""

from todo_api.users.schemas import UserCredentials, UserPublic
from todo_api.users.store import UserStore

__all__ = ["UserCredentials", "UserPublic", "UserStore"]
