"""
Todo 存储层

每个操作都同时按 id 和 creator 过滤，其他用户的 Todo 即使 id 正确也查不到。
id 不是合法 UUID 时与"不存在"同样处理，抛 NotFound。

所有数据库异常统一包装为 StoreError，不做重试。
"""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.db.models import Todo
from todo_api.errors import NotFound, StoreError
from todo_api.todo.schemas import new_todo_fields, todo_patch_fields

log = structlog.get_logger()


def parse_todo_id(todo_id: str | uuid.UUID) -> uuid.UUID | None:
    """把路径参数解析为 UUID，格式非法返回 None"""
    if isinstance(todo_id, uuid.UUID):
        return todo_id
    try:
        return uuid.UUID(todo_id)
    except (TypeError, ValueError, AttributeError):
        return None


class TodoStore:
    """按用户隔离的 Todo CRUD，绑定单个请求的 AsyncSession"""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def create(self, owner_id: uuid.UUID, text: str | None, completed: bool = False) -> Todo:
        """为 owner_id 创建 Todo，completed 为 True 时同时写入完成时间"""
        todo = Todo(creator=owner_id, **new_todo_fields(text, completed))
        try:
            self._db.add(todo)
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise StoreError("创建 Todo 失败", cause=e) from e
        return todo

    async def list_by_owner(self, owner_id: uuid.UUID) -> list[Todo]:
        """列出用户的全部 Todo，顺序为存储原生顺序"""
        try:
            result = await self._db.scalars(select(Todo).where(Todo.creator == owner_id))
        except SQLAlchemyError as e:
            raise StoreError("查询 Todo 列表失败", cause=e) from e
        return list(result.all())

    async def find_one(self, owner_id: uuid.UUID, todo_id: str | uuid.UUID) -> Todo:
        try:
            return await self._find(owner_id, todo_id)
        except SQLAlchemyError as e:
            raise StoreError("查询 Todo 失败", cause=e) from e

    async def update(
        self,
        owner_id: uuid.UUID,
        todo_id: str | uuid.UUID,
        *,
        text: str | None = None,
        completed: bool | None = None,
    ) -> Todo:
        """
        更新 text / completed。

        completed 为 True 时写入当前毫秒时间戳；否则（含未传）
        重置为未完成并清空 completed_at。
        """
        fields = todo_patch_fields(text, completed)
        try:
            todo = await self._find(owner_id, todo_id, for_update=True)
            for key, value in fields.items():
                setattr(todo, key, value)
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise StoreError("更新 Todo 失败", cause=e) from e
        return todo

    async def delete(self, owner_id: uuid.UUID, todo_id: str | uuid.UUID) -> Todo:
        """删除并返回被删除的记录"""
        try:
            todo = await self._find(owner_id, todo_id, for_update=True)
            await self._db.delete(todo)
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise StoreError("删除 Todo 失败", cause=e) from e
        log.info("Todo 已删除", todo_id=str(todo.id), owner_id=str(owner_id))
        return todo

    async def _find(
        self,
        owner_id: uuid.UUID,
        todo_id: str | uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Todo:
        parsed = parse_todo_id(todo_id)
        if parsed is None:
            raise NotFound(f"Todo id 格式非法: {todo_id!r}")

        stmt = select(Todo).where(Todo.id == parsed, Todo.creator == owner_id)
        if for_update:
            stmt = stmt.with_for_update()
        todo = await self._db.scalar(stmt)
        if todo is None:
            raise NotFound(f"Todo {parsed} 不存在")
        return todo
