"""
Todo 模型：completed_at 为毫秒级时间戳，当且仅当 completed 为 True 时非空
"""

import uuid

from sqlalchemy import BigInteger, Boolean, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from uuid6 import uuid7

from todo_api.db.models.base import Base


class Todo(Base):
    """待办事项表"""

    __tablename__ = "todos"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid7)
    text: Mapped[str] = mapped_column(Text, nullable=False, comment="待办内容")
    completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false", comment="是否完成"
    )
    completed_at: Mapped[int | None] = mapped_column(BigInteger, comment="完成时间（epoch 毫秒）")
    creator: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="所属用户",
    )

    def __repr__(self) -> str:
        return f"<Todo {self.id} completed={self.completed}>"
