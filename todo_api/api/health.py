"""
健康检查接口：探活 + 数据库连接状态
"""

import structlog
from fastapi import APIRouter, Request

router = APIRouter(tags=["健康检查"])
log = structlog.get_logger()


@router.get("/health")
async def health_check(request: Request):
    """健康检查：校验数据库连接"""
    status = {"status": "ok", "database": "ok"}
    try:
        await request.app.state.db.ping()
    except Exception as e:
        status["database"] = f"error: {e}"
        status["status"] = "degraded"
        log.error("数据库健康检查失败", error=str(e))
    return status
