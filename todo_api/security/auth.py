"""
鉴权依赖：从请求头取会话 Token → 解析为用户 → 注入请求上下文

Unauthenticated → Token 存在? → 签名合法且仍在用户 tokens 中? → Authenticated | 401
任一环节失败直接返回 401，路由处理函数不会执行。
"""

from dataclasses import dataclass

import structlog
from fastapi import Depends, HTTPException, Request

from todo_api.api.deps import get_app_settings, get_user_store
from todo_api.config import Settings
from todo_api.db.models import User
from todo_api.errors import AuthError, StoreError
from todo_api.observability.context import bind_user
from todo_api.observability.metrics import AUTH_TOTAL
from todo_api.users.store import UserStore

log = structlog.get_logger()


@dataclass
class AuthContext:
    """鉴权后的请求上下文：当前用户 + 原始 Token（注销时要用）"""

    user: User
    token: str


async def get_current_user(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    users: UserStore = Depends(get_user_store),
) -> AuthContext:
    """FastAPI 依赖注入：校验会话 Token 并返回用户上下文"""
    token = request.headers.get(settings.AUTH_HEADER)
    if not token:
        AUTH_TOTAL.labels(event="verify", outcome="failure").inc()
        raise HTTPException(status_code=401, detail="缺少认证 Token")

    try:
        user = await users.find_by_token(token)
    except AuthError as e:
        AUTH_TOTAL.labels(event="verify", outcome="failure").inc()
        log.warning("Token 校验失败", reason=str(e))
        raise HTTPException(status_code=401, detail="无效 Token")
    except StoreError as e:
        AUTH_TOTAL.labels(event="verify", outcome="failure").inc()
        log.error(
            "Token 校验时查询用户失败", error=str(e.cause or e), exc_info=e.cause or e
        )
        raise HTTPException(status_code=401, detail="无效 Token")

    bind_user(str(user.id))
    AUTH_TOTAL.labels(event="verify", outcome="success").inc()
    return AuthContext(user=user, token=token)
