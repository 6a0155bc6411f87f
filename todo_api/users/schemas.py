"""
用户请求/响应模型 + 注册字段校验

对外只暴露 {id, email}，密码哈希与 tokens 永不出现在响应中。
"""

import uuid

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict

from todo_api.errors import ValidationError

PASSWORD_MIN_LENGTH = 6


class UserCredentials(BaseModel):
    """注册 / 登录请求体，未知字段直接忽略"""

    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    password: str | None = None


class UserPublic(BaseModel):
    """对外的用户视图"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str


def new_user_fields(email: str | None, password: str | None) -> tuple[str, str]:
    """校验注册字段，返回 (去空白的 email, password)；任一字段不合法抛 ValidationError"""
    errors: dict[str, str] = {}

    email = (email or "").strip()
    if not email:
        errors["email"] = "email 为必填项"
    else:
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            errors["email"] = f"{email} 不是合法的邮箱地址"

    if not password:
        errors["password"] = "password 为必填项"
    elif len(password) < PASSWORD_MIN_LENGTH:
        errors["password"] = f"password 长度不能少于 {PASSWORD_MIN_LENGTH} 位"

    if errors:
        raise ValidationError(errors)
    return email, password
