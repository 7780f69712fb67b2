"""
关联记录写入
主记录写入后，将解析得到的引用以一条多行 INSERT 写入关联表

写入方式由 ASSOCIATION_WRITE_MODE 决定：
- background: 提交主记录并返回响应后，在后台任务中用独立会话写入；
  失败只记录日志，不通知调用方，不回滚主记录，不重试
- inline: 与主记录在同一事务中写入，失败时整体回滚并返回 500
"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Type

from fastapi import BackgroundTasks
from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from . import database
from .config import get_settings

logger = logging.getLogger(__name__)

AssociationRows = List[Dict[str, Any]]


async def insert_association_rows(model: Type[Any], rows: AssociationRows) -> bool:
    """
    在独立会话中写入关联记录（后台任务用）

    Returns:
        是否写入成功
    """
    table = model.__tablename__
    try:
        async with database.get_db_session() as session:
            await session.execute(insert(model).values(rows))
            await session.commit()
    except SQLAlchemyError as e:
        logger.error(f"关联记录写入失败 `{table}`（{len(rows)} 行）: {e}")
        return False

    logger.debug(f"关联记录写入完成 `{table}`（{len(rows)} 行）")
    return True


class AssociationWriter:
    """
    关联记录写入器

    Usage:
        writer = AssociationWriter(db, background_tasks)
        await writer.stage(DocumentTagMap, [{"document_id": 1, "tag_id": 2}])
        await db.commit()
        writer.dispatch()
    """

    def __init__(
        self,
        db: AsyncSession,
        background_tasks: Optional[BackgroundTasks] = None,
        mode: Optional[str] = None
    ):
        self.db = db
        self.background_tasks = background_tasks
        self.mode = mode or get_settings().association_write_mode
        self._pending: List[Tuple[Type[Any], AssociationRows]] = []

    async def stage(self, model: Type[Any], rows: AssociationRows) -> None:
        """登记一组关联记录；inline 模式下立即在当前事务中写入"""
        if not rows:
            return
        if self.mode == "inline":
            await self.db.execute(insert(model).values(rows))
            return
        self._pending.append((model, rows))

    def dispatch(self) -> None:
        """主记录提交后调用，将待写入的关联记录交给后台任务"""
        if self.background_tasks is None and self._pending:
            raise RuntimeError("background 写入模式需要 BackgroundTasks")
        for model, rows in self._pending:
            self.background_tasks.add_task(insert_association_rows, model, rows)
        self._pending = []
