"""
文档业务逻辑
创建流程：校验 -> 解析引用 -> 写入文档 -> 写入关联记录
"""

import logging
from typing import List, Optional
from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from core.associations import AssociationWriter
from core.references import ReferenceResolver
from modules.tags.tags_models import Tag
from modules.tags.tags_schemas import TagInfo

from .documents_models import Document, DocumentTag, DocumentTagMap, DocumentDocumentTagMap
from .documents_schemas import DocumentCreate, DocumentTagCreate, DocumentInfo, DocumentTagInfo

logger = logging.getLogger(__name__)

tag_resolver = ReferenceResolver(Tag, "Tag")
document_tag_resolver = ReferenceResolver(DocumentTag, "DocumentTag")


class DocumentsService:
    """文档服务"""

    def __init__(self, db: AsyncSession, user_id: int):
        self.db = db
        self.user_id = user_id  # 所有操作都限定在当前用户

    # ============ 文档操作 ============

    async def create_document(
        self,
        data: DocumentCreate,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> DocumentInfo:
        """创建文档，引用的标签与文档标签必须全部属于当前用户"""
        tags = await tag_resolver.resolve(self.db, self.user_id, data.tag_ids)
        document_tags = await document_tag_resolver.resolve(self.db, self.user_id, data.document_tag_ids)

        document = Document(user_id=self.user_id, title=data.title, url=data.url)
        self.db.add(document)
        await self.db.flush()

        writer = AssociationWriter(self.db, background_tasks)
        await writer.stage(
            DocumentTagMap,
            [{"document_id": document.id, "tag_id": t.id} for t in tags]
        )
        await writer.stage(
            DocumentDocumentTagMap,
            [{"document_id": document.id, "document_tag_id": t.id} for t in document_tags]
        )
        await self.db.commit()
        writer.dispatch()

        logger.info(f"文档已创建: id={document.id}, user_id={self.user_id}")
        return DocumentInfo(
            id=document.id,
            title=document.title,
            url=document.url,
            tags=[TagInfo.model_validate(t) for t in tags],
            document_tags=[DocumentTagInfo.model_validate(t) for t in document_tags]
        )

    async def get_documents(self) -> List[DocumentInfo]:
        """获取文档列表，附带引用的标签与文档标签"""
        result = await self.db.execute(
            select(Document).where(Document.user_id == self.user_id)
            .order_by(Document.id)
        )
        documents = list(result.scalars().all())
        ids = [d.id for d in documents]

        tags = await tag_resolver.fetch_linked(
            self.db, self.user_id, DocumentTagMap, "document_id", "tag_id", ids
        )
        document_tags = await document_tag_resolver.fetch_linked(
            self.db, self.user_id, DocumentDocumentTagMap, "document_id", "document_tag_id", ids
        )

        return [
            DocumentInfo(
                id=d.id,
                title=d.title,
                url=d.url,
                tags=[TagInfo.model_validate(t) for t in tags.get(d.id, [])],
                document_tags=[DocumentTagInfo.model_validate(t) for t in document_tags.get(d.id, [])]
            )
            for d in documents
        ]

    # ============ 文档标签操作 ============

    async def create_document_tag(self, data: DocumentTagCreate) -> DocumentTag:
        """创建文档标签"""
        document_tag = DocumentTag(user_id=self.user_id, name=data.name)
        self.db.add(document_tag)
        await self.db.flush()
        await self.db.refresh(document_tag)
        return document_tag

    async def get_document_tags(self) -> List[DocumentTag]:
        """获取文档标签列表"""
        result = await self.db.execute(
            select(DocumentTag).where(DocumentTag.user_id == self.user_id)
            .order_by(DocumentTag.id)
        )
        return list(result.scalars().all())
