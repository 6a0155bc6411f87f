"""
密码哈希 + 会话 Token 签发 / 校验

- 密码：bcrypt 加盐哈希，同一明文每次哈希结果不同
- Token：JWT（HS256），载荷 {sub, access, jti}，不带过期时间，
  是否有效由签名 + 用户 tokens 列表中的存在性共同决定
"""

import uuid
from dataclasses import dataclass

import bcrypt
import jwt

from todo_api.errors import InvalidToken

AUTH_ACCESS = "auth"
BCRYPT_MAX_BYTES = 72  # bcrypt 只处理前 72 字节，超出部分截断

# 用户不存在时也跑一次 checkpw，避免通过耗时差异枚举邮箱
DUMMY_HASH = bcrypt.hashpw(b"dummy-password", bcrypt.gensalt()).decode()


@dataclass(frozen=True)
class TokenPayload:
    """解码后的 Token 载荷"""

    user_id: str
    access: str


def _pw_bytes(password: str) -> bytes:
    return password.encode()[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """生成密码哈希"""
    return bcrypt.hashpw(_pw_bytes(password), bcrypt.gensalt()).decode()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """校验密码，不匹配或哈希格式错误一律返回 False"""
    try:
        return bcrypt.checkpw(_pw_bytes(plain_password), hashed_password.encode())
    except ValueError:
        # 非 bcrypt 格式的哈希（如 "Invalid salt"）
        return False


def issue_token(user_id: str, *, secret: str, algorithm: str = "HS256") -> str:
    """签发会话 Token"""
    payload = {
        "sub": str(user_id),
        "access": AUTH_ACCESS,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def verify_token(token: str, *, secret: str, algorithm: str = "HS256") -> TokenPayload:
    """校验签名并解析载荷，不做过期检查"""
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["sub", "access"]},
        )
    except jwt.InvalidTokenError as e:
        raise InvalidToken(f"无效 Token: {e}") from e

    user_id = payload["sub"]
    access = payload["access"]
    if not isinstance(user_id, str) or not isinstance(access, str):
        raise InvalidToken("Token 载荷格式错误")
    return TokenPayload(user_id=user_id, access=access)
