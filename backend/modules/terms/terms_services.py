"""
期间业务逻辑
列表只展开一层子期间
"""

import logging
from typing import Dict, List, Optional, Tuple
from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_

from core.associations import AssociationWriter
from core.references import ReferenceResolver
from modules.tags.tags_models import Tag
from modules.tags.tags_schemas import TagInfo

from .terms_models import Term, TermTagMap
from .terms_schemas import TermCreate, TermInfo, SubTermInfo

logger = logging.getLogger(__name__)

tag_resolver = ReferenceResolver(Tag, "Tag")
term_resolver = ReferenceResolver(Term, "Term")


class TermsService:
    """期间服务"""

    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id

    async def create_term(
        self,
        data: TermCreate,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> Tuple[Term, List[Tag]]:
        """创建期间"""
        if data.parent_id is not None:
            await term_resolver.resolve_one(self.db, self.user_id, data.parent_id)
        tags = await tag_resolver.resolve(self.db, self.user_id, data.tag_ids)

        term = Term(
            user_id=self.user_id,
            name=data.name,
            description=data.description,
            start=data.start,
            end=data.end,
            parent_id=data.parent_id
        )
        self.db.add(term)
        await self.db.flush()

        writer = AssociationWriter(self.db, background_tasks)
        await writer.stage(TermTagMap, [{"term_id": term.id, "tag_id": t.id} for t in tags])
        await self.db.commit()
        writer.dispatch()

        logger.info(f"期间已创建: id={term.id}, user_id={self.user_id}")
        return term, tags

    async def get_terms(self) -> List[TermInfo]:
        """获取顶层期间，附带标签与子期间"""
        result = await self.db.execute(
            select(Term).where(
                and_(
                    Term.user_id == self.user_id,
                    Term.parent_id.is_(None)
                )
            ).order_by(Term.start, Term.id)
        )
        terms = list(result.scalars().all())
        ids = [t.id for t in terms]

        tags = await tag_resolver.fetch_linked(
            self.db, self.user_id, TermTagMap, "term_id", "tag_id", ids
        )

        sub_terms: Dict[int, List[SubTermInfo]] = {}
        if ids:
            result = await self.db.execute(
                select(Term).where(
                    and_(
                        Term.user_id == self.user_id,
                        Term.parent_id.in_(ids)
                    )
                ).order_by(Term.start, Term.id)
            )
            for child in result.scalars().all():
                sub_terms.setdefault(child.parent_id, []).append(SubTermInfo.model_validate(child))

        items = []
        for term in terms:
            item = TermInfo.model_validate(term)
            item.tags = [TagInfo.model_validate(t) for t in tags.get(term.id, [])]
            item.sub_terms = sub_terms.get(term.id, [])
            items.append(item)
        return items
