"""
请求超时中间件：整个请求超过 REQUEST_TIMEOUT 秒直接返回 504

数据库客户端自身的超时（连接池等待 / 单条 SQL）在 Database 中配置，
这里兜底整体耗时，避免请求无限挂起。
"""

import asyncio

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from todo_api.observability.context import get_trace_id

log = structlog.get_logger()


class TimeoutMiddleware(BaseHTTPMiddleware):
    """单请求总耗时上限"""

    def __init__(self, app: ASGIApp, timeout: float):
        super().__init__(app)
        self.timeout = timeout

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            log.warning(
                "请求超时",
                method=request.method,
                path=request.url.path,
                timeout=self.timeout,
            )
            return JSONResponse(
                status_code=504,
                content={"detail": "请求超时", "trace_id": get_trace_id()},
            )
