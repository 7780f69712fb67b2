"""
标签业务逻辑
包含严格的用户隔离校验，层级只展开一层
"""

from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_

from core.errors import NotFoundException, UnprocessableException
from core.references import ReferenceResolver
from modules.documents.documents_models import DocumentTagMap
from modules.terms.terms_models import TermTagMap
from modules.todos.todos_models import TodoTagMap

from .tags_models import Tag, RecordScheme
from .tags_schemas import (
    TagCreate, TagInfo, TagTreeNode, RecordSchemeCreate, tag_detail
)

tag_resolver = ReferenceResolver(Tag, "Tag")

# 引用标签的关联表
TAG_MAP_MODELS = (DocumentTagMap, TermTagMap, TodoTagMap)


class TagsService:
    """标签服务"""

    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id  # 所有操作都限定在当前用户

    # ============ 标签操作 ============

    async def get_tag(self, tag_id: int) -> Optional[Tag]:
        """获取标签（验证用户权限）"""
        result = await self.db.execute(
            select(Tag).where(
                and_(
                    Tag.id == tag_id,
                    Tag.user_id == self.user_id
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_owned_tag(self, tag_id: int) -> Tag:
        """获取标签，不存在时返回 404"""
        tag = await self.get_tag(tag_id)
        if not tag:
            raise NotFoundException("Tag")
        return tag

    async def get_tag_detail(self, tag_id: int) -> dict:
        """获取标签及其子标签"""
        tag = await self.get_owned_tag(tag_id)

        result = await self.db.execute(
            select(Tag).where(
                and_(
                    Tag.parent_id == tag.id,
                    Tag.user_id == self.user_id
                )
            ).order_by(Tag.order, Tag.id)
        )
        return tag_detail(tag, list(result.scalars().all()))

    async def get_tag_tree(self, show_hidden: bool = True) -> List[TagTreeNode]:
        """获取顶层标签及其子标签"""
        query = select(Tag).where(
            and_(
                Tag.user_id == self.user_id,
                Tag.parent_id.is_(None)
            )
        )
        if not show_hidden:
            query = query.where(Tag.hidden.is_(False))
        result = await self.db.execute(query.order_by(Tag.order, Tag.id))
        parents = list(result.scalars().all())
        if not parents:
            return []

        query = select(Tag).where(
            and_(
                Tag.user_id == self.user_id,
                Tag.parent_id.in_([p.id for p in parents])
            )
        )
        if not show_hidden:
            query = query.where(Tag.hidden.is_(False))
        result = await self.db.execute(query.order_by(Tag.order, Tag.id))

        children: Dict[int, List[TagInfo]] = {}
        for child in result.scalars().all():
            children.setdefault(child.parent_id, []).append(TagInfo.model_validate(child))

        tree = []
        for parent in parents:
            node = TagTreeNode.model_validate(parent)
            node.tags = children.get(parent.id, [])
            tree.append(node)
        return tree

    async def create_tag(self, data: TagCreate) -> Tag:
        """创建标签"""
        if data.parent_id is not None:
            await tag_resolver.resolve_one(self.db, self.user_id, data.parent_id)

        tag = Tag(
            user_id=self.user_id,
            name=data.name,
            theme_color=data.theme_color,
            parent_id=data.parent_id,
            pinned=data.pinned
        )
        self.db.add(tag)
        await self.db.flush()
        await self.db.refresh(tag)
        return tag

    async def update_tag(self, tag_id: int, changes: dict) -> bool:
        """
        更新标签

        Returns:
            是否命中记录（值未变化也视为命中）
        """
        parent_id = changes.get("parent_id")
        if parent_id is not None:
            if parent_id == tag_id:
                raise UnprocessableException("parent_id")
            await tag_resolver.resolve_one(self.db, self.user_id, parent_id)

        result = await self.db.execute(
            update(Tag).where(
                and_(
                    Tag.id == tag_id,
                    Tag.user_id == self.user_id
                )
            ).values(**changes)
        )
        return result.rowcount == 1

    async def delete_tag(self, tag_id: int) -> bool:
        """删除标签，同时删除关联记录与记录方案，子标签提升为顶层"""
        tag = await self.get_tag(tag_id)
        if not tag:
            return False

        for model in TAG_MAP_MODELS:
            await self.db.execute(delete(model).where(model.tag_id == tag.id))
        await self.db.execute(delete(RecordScheme).where(RecordScheme.tag_id == tag.id))
        await self.db.execute(
            update(Tag).where(
                and_(
                    Tag.parent_id == tag.id,
                    Tag.user_id == self.user_id
                )
            ).values(parent_id=None)
        )

        result = await self.db.execute(
            delete(Tag).where(
                and_(
                    Tag.id == tag.id,
                    Tag.user_id == self.user_id
                )
            )
        )
        return result.rowcount == 1

    # ============ 记录方案操作 ============

    async def create_record_scheme(self, tag: Tag, data: RecordSchemeCreate) -> RecordScheme:
        """在标签下创建记录方案"""
        scheme = RecordScheme(tag_id=tag.id, **data.model_dump())
        self.db.add(scheme)
        await self.db.flush()
        await self.db.refresh(scheme)
        return scheme

    async def get_record_schemes(self, tag_id: int) -> List[RecordScheme]:
        """获取标签下的全部记录方案"""
        tag = await self.get_owned_tag(tag_id)
        result = await self.db.execute(
            select(RecordScheme).where(RecordScheme.tag_id == tag.id)
            .order_by(RecordScheme.id)
        )
        return list(result.scalars().all())

    async def get_record_scheme(self, tag_id: int, scheme_id: int) -> RecordScheme:
        """获取记录方案，标签或方案不存在时返回 404"""
        tag = await self.get_owned_tag(tag_id)
        result = await self.db.execute(
            select(RecordScheme).where(
                and_(
                    RecordScheme.id == scheme_id,
                    RecordScheme.tag_id == tag.id
                )
            )
        )
        scheme = result.scalar_one_or_none()
        if not scheme:
            raise NotFoundException("RecordScheme")
        return scheme

    async def update_record_scheme(self, tag_id: int, scheme_id: int, changes: dict) -> bool:
        """更新记录方案"""
        tag = await self.get_owned_tag(tag_id)
        result = await self.db.execute(
            update(RecordScheme).where(
                and_(
                    RecordScheme.id == scheme_id,
                    RecordScheme.tag_id == tag.id
                )
            ).values(**changes)
        )
        return result.rowcount == 1

    async def delete_record_scheme(self, tag_id: int, scheme_id: int) -> bool:
        """删除记录方案"""
        tag = await self.get_owned_tag(tag_id)
        result = await self.db.execute(
            delete(RecordScheme).where(
                and_(
                    RecordScheme.id == scheme_id,
                    RecordScheme.tag_id == tag.id
                )
            )
        )
        return result.rowcount == 1
