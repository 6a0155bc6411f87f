"""
链路追踪上下文：通过 contextvars 在协程间传播 trace_id / user_id，
同时绑定到 structlog 上下文，之后的日志自动携带
"""

import contextvars
import uuid

import structlog

trace_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("trace_id", default="")
user_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("user_id", default="anonymous")


def new_trace_id() -> str:
    return str(uuid.uuid4())


def bind_trace(trace_id: str) -> None:
    """请求入口调用：重置日志上下文并绑定 trace_id"""
    trace_id_var.set(trace_id)
    user_id_var.set("anonymous")
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(trace_id=trace_id)


def bind_user(user_id: str) -> None:
    """鉴权通过后调用"""
    user_id_var.set(user_id)
    structlog.contextvars.bind_contextvars(user_id=user_id)


def get_trace_id() -> str:
    return trace_id_var.get()
