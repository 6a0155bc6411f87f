"""
数据库句柄：AsyncEngine 创建 + AsyncSession 工厂

不做模块级单例：由 create_app 显式构造，lifespan 中 connect / close，
挂在 app.state.db 上，路由和鉴权依赖通过 get_db 拿会话。
"""

from collections.abc import AsyncIterator

import structlog
from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from todo_api.config import Settings
from todo_api.db.models import Base

log = structlog.get_logger()


class Database:
    """进程级数据库连接句柄，生命周期由应用显式管理"""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database 未连接，请先调用 connect()")
        return self._engine

    def _engine_kwargs(self) -> dict:
        settings = self._settings
        kwargs: dict = {"echo": settings.DB_ECHO}
        url = make_url(settings.DATABASE_URL)
        if url.get_backend_name() == "sqlite":
            # SQLite 无连接池参数，测试/本地开发用
            return kwargs
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
        if url.get_driver_name() == "asyncpg":
            kwargs["connect_args"] = {"command_timeout": settings.DB_COMMAND_TIMEOUT}
        return kwargs

    async def connect(self) -> None:
        """创建引擎并预检连接（Fail Fast）"""
        self._engine = create_async_engine(self._settings.DATABASE_URL, **self._engine_kwargs())
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        async with self._engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if self._settings.DB_AUTO_CREATE:
                await conn.run_sync(Base.metadata.create_all)
                log.info("数据表已自动创建")

    async def close(self) -> None:
        """释放连接池"""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def session(self) -> AsyncSession:
        """新建一个会话，调用方负责 async with 关闭"""
        if self._session_factory is None:
            raise RuntimeError("Database 未连接，请先调用 connect()")
        return self._session_factory()

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI 依赖注入：获取数据库会话"""
    database: Database = request.app.state.db
    async with database.session() as session:
        yield session
