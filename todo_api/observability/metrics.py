"""
Prometheus 指标定义

所有指标统一在此文件定义，中间件和路由按需引用。
"""

from prometheus_client import Counter, Histogram

# ── 请求级指标 ──

REQUEST_TOTAL = Counter(
    "todo_request_total",
    "HTTP 请求总数",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "todo_request_duration_ms",
    "HTTP 请求耗时（毫秒）",
    ["method", "endpoint"],
    buckets=[5, 10, 25, 50, 100, 200, 500, 1000, 5000],
)

# ── 鉴权指标 ──

AUTH_TOTAL = Counter(
    "todo_auth_total",
    "鉴权事件总数",
    ["event", "outcome"],  # event: register/login/logout/verify；outcome: success/failure
)

# ── 业务指标 ──

TODO_OPS_TOTAL = Counter(
    "todo_store_ops_total",
    "Todo 操作总数",
    ["op", "outcome"],  # op: create/list/get/update/delete；outcome: success/not_found/invalid/error
)
