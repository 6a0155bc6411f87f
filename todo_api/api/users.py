"""
用户接口：注册 / 登录 / 当前用户 / 注销

注册、登录成功后 Token 放在 x-auth 响应头中返回，响应体只含 {id, email}。
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from todo_api.api.deps import get_app_settings, get_user_store
from todo_api.config import Settings
from todo_api.db.models import User
from todo_api.errors import AuthError, StoreError, ValidationError
from todo_api.observability.metrics import AUTH_TOTAL
from todo_api.security.auth import AuthContext, get_current_user
from todo_api.users.schemas import UserCredentials, UserPublic
from todo_api.users.store import UserStore

router = APIRouter(prefix="/users", tags=["用户"])
log = structlog.get_logger()


def _user_with_token(user: User, token: str, header: str) -> JSONResponse:
    body = UserPublic.model_validate(user).model_dump(mode="json")
    return JSONResponse(content=body, headers={header: token})


@router.post("", response_model=UserPublic)
async def register(
    body: UserCredentials,
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
):
    """注册并直接签发一个会话 Token"""
    try:
        user = await users.create(body.email, body.password)
        token = await users.generate_auth_token(user)
    except ValidationError as e:
        AUTH_TOTAL.labels(event="register", outcome="failure").inc()
        log.warning("注册参数校验失败", errors=e.errors)
        return JSONResponse(status_code=400, content={"errors": e.errors})
    except StoreError as e:
        AUTH_TOTAL.labels(event="register", outcome="failure").inc()
        log.error("注册失败", error=str(e.cause or e), exc_info=e.cause or e)
        return Response(status_code=400)

    AUTH_TOTAL.labels(event="register", outcome="success").inc()
    return _user_with_token(user, token, settings.AUTH_HEADER)


@router.post("/login", response_model=UserPublic)
async def login(
    body: UserCredentials,
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
):
    """邮箱密码登录，成功后追加一个新的会话 Token"""
    try:
        user = await users.find_by_credentials(body.email, body.password)
        token = await users.generate_auth_token(user)
    except AuthError:
        AUTH_TOTAL.labels(event="login", outcome="failure").inc()
        log.warning("登录失败：邮箱或密码错误")
        return Response(status_code=400)
    except StoreError as e:
        AUTH_TOTAL.labels(event="login", outcome="failure").inc()
        log.error("登录失败", error=str(e.cause or e), exc_info=e.cause or e)
        return Response(status_code=400)

    AUTH_TOTAL.labels(event="login", outcome="success").inc()
    log.info("用户登录成功", user_id=str(user.id))
    return _user_with_token(user, token, settings.AUTH_HEADER)


@router.get("/me", response_model=UserPublic)
async def me(auth: AuthContext = Depends(get_current_user)):
    return UserPublic.model_validate(auth.user)


@router.delete("/me/token")
async def logout(
    auth: AuthContext = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    """注销：从用户的 tokens 中移除当前 Token"""
    try:
        await users.remove_token(auth.user, auth.token)
    except StoreError as e:
        AUTH_TOTAL.labels(event="logout", outcome="failure").inc()
        log.error("注销失败", error=str(e.cause or e), exc_info=e.cause or e)
        return Response(status_code=400)

    AUTH_TOTAL.labels(event="logout", outcome="success").inc()
    log.info("用户注销", user_id=str(auth.user.id))
    return Response(status_code=200)
