"""
数据库连接管理
提供异步数据库连接和会话管理
"""

import logging
from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from typing import AsyncGenerator

from .config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def _engine_options(url: str) -> dict:
    """根据数据库类型生成引擎参数"""
    if url.startswith("sqlite"):
        # 内存数据库需共享同一连接，否则每个连接各自为一个空库
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
    }


# 创建异步引擎
engine = create_async_engine(
    settings.db_url,
    echo=False,  # 禁用 SQL 详细输出，避免日志过多
    **_engine_options(settings.db_url)
)

# 会话工厂
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)


class Base(DeclarativeBase):
    """模型基类"""
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """获取数据库会话（依赖注入用）"""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    获取独立的数据库会话（后台任务用）
    请求结束后会话已关闭，后台任务必须自行获取连接
    """
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """初始化数据库（创建所有表）"""
    # 确保所有模型已注册到 Base.metadata
    import models  # noqa: F401
    import modules  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug(f"数据库表初始化完成（共 {len(Base.metadata.tables)} 张表）")


async def close_db():
    """关闭数据库连接"""
    await engine.dispose()
