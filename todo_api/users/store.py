"""
User 存储层：注册 / 凭据校验 / 会话 Token 签发与注销

会话有效 = Token 签名合法 AND Token 仍在该用户的 tokens 列表中。
注销只从列表中移除，签名本身依旧合法，因此两项检查缺一不可。

所有数据库异常统一包装为 StoreError，不做重试。
"""

import asyncio
import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.config import Settings
from todo_api.db.models import User
from todo_api.errors import AuthError, StoreError, ValidationError
from todo_api.security.codec import (
    AUTH_ACCESS,
    DUMMY_HASH,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)
from todo_api.users.schemas import new_user_fields

log = structlog.get_logger()


class UserStore:
    """用户表 CRUD，绑定单个请求的 AsyncSession"""

    def __init__(self, db: AsyncSession, settings: Settings):
        self._db = db
        self._secret = settings.JWT_SECRET
        self._algorithm = settings.JWT_ALGORITHM

    # ── 注册 / 登录 ──

    async def create(self, email: str | None, password: str | None) -> User:
        """注册新用户，密码落库前先哈希"""
        email, password = new_user_fields(email, password)
        duplicate = ValidationError({"email": f"{email} 已被注册"})

        try:
            existing = await self._db.scalar(select(User.id).where(User.email == email))
            if existing is not None:
                raise duplicate

            hashed = await asyncio.to_thread(hash_password, password)
            user = User(email=email, hashed_pwd=hashed, tokens=[])
            self._db.add(user)
            await self._db.commit()
        except IntegrityError as e:
            # 并发注册同一邮箱时由唯一约束兜底
            await self._db.rollback()
            raise duplicate from e
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise StoreError("创建用户失败", cause=e) from e

        log.info("用户注册成功", user_id=str(user.id))
        return user

    async def find_by_credentials(self, email: str | None, password: str | None) -> User:
        """按邮箱 + 密码查找用户，任一不匹配抛 AuthError"""
        email = (email or "").strip()
        password = password or ""

        try:
            user = await self._db.scalar(select(User).where(User.email == email))
        except SQLAlchemyError as e:
            raise StoreError("查询用户失败", cause=e) from e

        if user is None:
            await asyncio.to_thread(verify_password, password, DUMMY_HASH)
            raise AuthError("邮箱或密码错误")
        if not await asyncio.to_thread(verify_password, password, user.hashed_pwd):
            raise AuthError("邮箱或密码错误")
        return user

    # ── 会话 Token ──

    async def generate_auth_token(self, user: User) -> str:
        """签发 Token 并追加到用户的 tokens 列表"""
        token = issue_token(str(user.id), secret=self._secret, algorithm=self._algorithm)

        try:
            locked = await self._lock_user(user.id)
            locked.tokens = [*locked.tokens, {"access": AUTH_ACCESS, "token": token}]
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise StoreError("保存 Token 失败", cause=e) from e

        return token

    async def find_by_token(self, token: str) -> User:
        """校验 Token 签名，并确认其仍在用户的活跃会话中"""
        payload = verify_token(token, secret=self._secret, algorithm=self._algorithm)
        if payload.access != AUTH_ACCESS:
            raise AuthError("Token 用途不匹配")

        try:
            user_id = uuid.UUID(payload.user_id)
        except ValueError as e:
            raise AuthError("Token 载荷中的用户 id 非法") from e

        try:
            user = await self._db.get(User, user_id)
        except SQLAlchemyError as e:
            raise StoreError("查询用户失败", cause=e) from e

        if user is None:
            raise AuthError("Token 对应的用户不存在")
        if not any(
            entry.get("access") == AUTH_ACCESS and entry.get("token") == token
            for entry in user.tokens
        ):
            raise AuthError("Token 已注销")
        return user

    async def remove_token(self, user: User, token: str) -> None:
        """从 tokens 列表移除指定 Token，重复调用无副作用"""
        try:
            locked = await self._lock_user(user.id)
            remaining = [entry for entry in locked.tokens if entry.get("token") != token]
            if len(remaining) != len(locked.tokens):
                locked.tokens = remaining
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            raise StoreError("移除 Token 失败", cause=e) from e

    async def _lock_user(self, user_id: uuid.UUID) -> User:
        """行锁读取最新的用户记录（SQLite 下 FOR UPDATE 被忽略）"""
        locked = await self._db.scalar(
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if locked is None:
            raise StoreError(f"用户 {user_id} 不存在")
        return locked
