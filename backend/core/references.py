"""
关联引用解析
校验请求中引用的 ID 是否存在且属于当前用户

同一套逻辑用于三类引用：标签、文档标签、期间，仅查询的表不同
"""

import logging
from typing import Any, Dict, Iterable, List, Sequence, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import NotFoundException
from utils.validators import coerce_ids

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """
    引用解析器

    Usage:
        tag_resolver = ReferenceResolver(Tag, "Tag")
        tags = await tag_resolver.resolve(db, user_id, body.get("tag_ids", []))
    """

    def __init__(self, model: Type[Any], kind: str):
        self.model = model
        self.kind = kind

    async def fetch_owned(self, db: AsyncSession, user_id: int, ids: Sequence[int]) -> List[Any]:
        """按 ID 批量获取当前用户拥有的记录，空集合不发起查询"""
        if not ids:
            return []
        result = await db.execute(
            select(self.model).where(
                self.model.user_id == user_id,
                self.model.id.in_(ids)
            )
        )
        return list(result.scalars().all())

    async def resolve(self, db: AsyncSession, user_id: int, candidates: Iterable[Any]) -> List[Any]:
        """
        解析引用列表

        非数字的候选值直接丢弃；任一 ID 未命中时抛出 404，消息中列出全部缺失的 ID

        Returns:
            按请求顺序排列的记录列表
        """
        ids = coerce_ids(candidates)
        rows = await self.fetch_owned(db, user_id, ids)

        if len(rows) != len(ids):
            found = {row.id for row in rows}
            missing = [i for i in ids if i not in found]
            logger.debug(f"{self.kind} 引用解析失败: user_id={user_id}, missing={missing}")
            raise NotFoundException(self.kind, missing)

        by_id = {row.id: row for row in rows}
        return [by_id[i] for i in ids]

    async def resolve_one(self, db: AsyncSession, user_id: int, resource_id: int) -> Any:
        """解析单个引用"""
        rows = await self.resolve(db, user_id, [resource_id])
        return rows[0]

    async def fetch_linked(
        self,
        db: AsyncSession,
        user_id: int,
        link_model: Type[Any],
        owner_key: str,
        ref_key: str,
        owner_ids: Sequence[int]
    ) -> Dict[int, List[Any]]:
        """
        通过关联表批量获取所属记录引用的行

        Returns:
            owner_id -> 引用行列表（按 ID 排序，重复关联只保留一条）
        """
        if not owner_ids:
            return {}

        owner_column = getattr(link_model, owner_key)
        ref_column = getattr(link_model, ref_key)
        result = await db.execute(
            select(owner_column, self.model)
            .join(self.model, self.model.id == ref_column)
            .where(
                owner_column.in_(owner_ids),
                self.model.user_id == user_id
            )
            .order_by(owner_column, self.model.id)
        )

        linked: Dict[int, List[Any]] = {}
        for owner_id, row in result.all():
            rows = linked.setdefault(owner_id, [])
            if not rows or rows[-1].id != row.id:
                rows.append(row)
        return linked
