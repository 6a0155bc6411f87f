"""
Todo 请求/响应模型 + 字段校验

对外字段名沿用 camelCase：completedAt。
"""

import time
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from todo_api.errors import ValidationError


class TodoCreate(BaseModel):
    """创建请求体，只取 text / completed"""

    model_config = ConfigDict(extra="ignore")

    text: str | None = None
    # 不做类型转换：只有 JSON 布尔 true 才算完成，"true" / 1 等一律视为未完成
    completed: Any = False


class TodoPatch(BaseModel):
    """更新请求体，只取 text / completed"""

    model_config = ConfigDict(extra="ignore")

    text: str | None = None
    completed: Any = None


class TodoOut(BaseModel):
    """对外的 Todo 视图"""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID
    text: str
    completed: bool
    completed_at: int | None = Field(default=None, alias="completedAt")
    creator: uuid.UUID


class TodoEnvelope(BaseModel):
    todo: TodoOut


class TodoList(BaseModel):
    todos: list[TodoOut]


def now_ms() -> int:
    """当前 epoch 毫秒时间戳"""
    return int(time.time() * 1000)


def _clean_text(text: str | None) -> str:
    text = (text or "").strip()
    if not text:
        raise ValidationError({"text": "text 为必填项且不能为空"})
    return text


def new_todo_fields(text: str | None, completed: Any = False) -> dict:
    """校验创建字段，返回可直接落库的列值"""
    text = _clean_text(text)
    return {
        "text": text,
        "completed": completed is True,
        "completed_at": now_ms() if completed is True else None,
    }


def todo_patch_fields(text: str | None, completed: Any) -> dict:
    """
    计算更新后的列值。

    completed 不是 True 时（包括未传）一律重置为未完成并清空 completed_at。
    """
    fields: dict = {}
    if text is not None:
        fields["text"] = _clean_text(text)
    if completed is True:
        fields["completed"] = True
        fields["completed_at"] = now_ms()
    else:
        fields["completed"] = False
        fields["completed_at"] = None
    return fields
