"""Database session management."""

from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.core.config import settings
from src.core.infrastructure.health import DatabaseHealthResult, HealthStatus

async_engine = create_async_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    echo=settings.ENVIRONMENT == "local" and settings.LOG_LEVEL == "DEBUG",
    pool_pre_ping=True,
    pool_size=5,
    max_overflow=10,
)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


AFTER_COMMIT_KEY = "after_commit_callbacks"


def run_after_commit(session: AsyncSession, callback: Callable[[], None]) -> None:
    """Register a callback that runs once the request transaction commits.

    回滚或提交失败时回调被丢弃。
    """
    session.info.setdefault(AFTER_COMMIT_KEY, []).append(callback)


def _fire_after_commit(session: AsyncSession) -> None:
    for callback in session.info.pop(AFTER_COMMIT_KEY, []):
        try:
            callback()
        except Exception as e:
            logger.exception(f"After-commit callback failed: {e}")


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session with automatic transaction management.

    一个请求一个事务：注册流程中的许可证扣减与用户创建在同一事务内提交或回滚。
    提交成功后才执行 ``run_after_commit`` 登记的回调。
    """
    async with AsyncSessionLocal() as session:
        async with session.begin():
            yield session
        _fire_after_commit(session)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """获取异步数据库会话（上下文管理器版本）。

    用于非 FastAPI 依赖注入场景（如后台通知任务）。

    Usage:
        async with get_async_session() as session:
            async with session.begin():
                ...
    """
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db() -> None:
    """Initialize database connection."""
    try:
        async with async_engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection established successfully")
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        raise


async def close_db() -> None:
    await async_engine.dispose()


async def check_db_health() -> DatabaseHealthResult:
    """检查数据库健康状态。

    Returns:
        DatabaseHealthResult: 健康检查结果
    """
    try:
        async with async_engine.connect() as conn:
            result = await conn.execute(text("SELECT version()"))
            version = result.scalar()
            return DatabaseHealthResult(
                status=HealthStatus.OK,
                connected=True,
                version=version.split(",")[0] if version else "unknown",
            )
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return DatabaseHealthResult(
            status=HealthStatus.ERROR,
            connected=False,
            error=str(e),
        )
