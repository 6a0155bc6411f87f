"""
请求级指标采集中间件

endpoint 标签取路由模板（/todos/{todo_id}），避免 id 造成标签基数爆炸。
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from todo_api.observability.metrics import REQUEST_DURATION, REQUEST_TOTAL

SKIP_PATHS = ("/metrics", "/health")


class MetricsMiddleware(BaseHTTPMiddleware):
    """HTTP 请求指标采集"""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path.startswith(SKIP_PATHS):
            return await call_next(request)

        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        route = request.scope.get("route")
        endpoint = getattr(route, "path", None) or "unmatched"
        method = request.method

        REQUEST_TOTAL.labels(
            method=method, endpoint=endpoint, status_code=str(response.status_code)
        ).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_ms)

        return response
