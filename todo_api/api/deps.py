"""
依赖注入：配置 / Store 均从 app.state 上的句柄派生，不使用模块级单例
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.config import Settings
from todo_api.db.engine import get_db
from todo_api.todo.store import TodoStore
from todo_api.users.store import UserStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_store(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> UserStore:
    return UserStore(db, settings)


def get_todo_store(db: AsyncSession = Depends(get_db)) -> TodoStore:
    return TodoStore(db)
