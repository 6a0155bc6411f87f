"""
用户模型

tokens 是活跃会话列表：[{"access": "auth", "token": "..."}]，
登录/注册时追加，注销时移除。
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from uuid6 import uuid7

from todo_api.db.models.base import Base


class User(Base):
    """用户表"""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid7)
    email: Mapped[str] = mapped_column(String(254), unique=True, nullable=False, comment="邮箱")
    hashed_pwd: Mapped[str] = mapped_column(String(256), nullable=False, comment="密码哈希")
    tokens: Mapped[list] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=False,
        default=list,
        comment="活跃会话 Token 列表",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), comment="创建时间"
    )

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email}>"
