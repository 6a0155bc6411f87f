"""
FastAPI 应用主入口
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from todo_api import __version__
from todo_api.api.health import router as health_router
from todo_api.api.middleware import TimeoutMiddleware
from todo_api.api.todos import router as todos_router
from todo_api.api.users import router as users_router
from todo_api.config import Settings, get_settings
from todo_api.db.engine import Database
from todo_api.observability.logging_config import setup_logging
from todo_api.observability.metrics_middleware import MetricsMiddleware
from todo_api.observability.request_logger import RequestLoggerMiddleware

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(application: FastAPI):
    """应用生命周期：启动时连接数据库（失败即拒绝启动），关闭时释放连接池"""
    settings: Settings = application.state.settings
    log.info("应用启动", env=settings.ENV, app=settings.APP_NAME)

    await application.state.db.connect()
    log.info("数据库连接正常")

    yield

    await application.state.db.close()
    log.info("应用关闭，资源已释放")


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求体解析失败统一按 400 返回"""
    log.warning("请求体校验失败", path=request.url.path, errors=exc.errors())
    errors = {
        ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "body": err.get("msg", "")
        for err in exc.errors()
    }
    return JSONResponse(status_code=400, content={"errors": errors})


def create_app(settings: Settings | None = None) -> FastAPI:
    """构造应用：数据库句柄显式创建并挂到 app.state，不走模块级单例"""
    settings = settings or get_settings()
    setup_logging(env=settings.ENV)

    application = FastAPI(
        title=settings.APP_NAME,
        version=__version__,
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.state.db = Database(settings)

    application.add_exception_handler(RequestValidationError, _request_validation_handler)

    # ── 中间件（后注册的在外层，先执行） ──
    application.add_middleware(TimeoutMiddleware, timeout=settings.REQUEST_TIMEOUT)
    application.add_middleware(MetricsMiddleware)
    application.add_middleware(RequestLoggerMiddleware)

    # ── Prometheus 指标端点 ──
    application.mount("/metrics", make_asgi_app())

    # ── 路由注册 ──
    application.include_router(health_router)
    application.include_router(users_router)
    application.include_router(todos_router)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("todo_api.main:app", host="0.0.0.0", port=get_settings().APP_PORT, reload=True)
