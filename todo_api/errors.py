"""
应用级异常：Store 层抛出，路由层就地捕获并映射为 HTTP 响应

- ValidationError → 400（带字段级错误详情）
- NotFound        → 404（空响应体）
- AuthError       → 401（未认证）/ 400（登录失败）
- StoreError      → 400（底层持久化失败，不与校验错误区分）
"""


class TodoApiError(Exception):
    """所有应用级异常的基类"""


class ValidationError(TodoApiError):
    """输入缺失、格式错误或唯一性冲突"""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


class NotFound(TodoApiError):
    """资源不存在，或 id 不符合存储的标识格式"""


class AuthError(TodoApiError):
    """缺失/无效/已注销的 Token，或账号密码错误"""


class InvalidToken(AuthError):
    """Token 签名校验失败或载荷格式错误"""


class StoreError(TodoApiError):
    """数据库读写失败"""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause
