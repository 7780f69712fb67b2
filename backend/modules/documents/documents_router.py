"""
文档API路由
文档与文档标签两组接口，均需认证且限定用户
"""

from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user, AuthContext
from utils.request import json_body

from .documents_schemas import DocumentCreate, DocumentTagCreate, DocumentTagInfo
from .documents_services import DocumentsService

router = APIRouter()
document_tags_router = APIRouter()


def get_service(db: AsyncSession, user: AuthContext) -> DocumentsService:
    """创建文档服务实例"""
    return DocumentsService(db, user.user_id)


# ============ 文档接口 ============

@router.post("")
async def create_document(
    background_tasks: BackgroundTasks,
    user: AuthContext = Depends(get_current_user),
    body: dict = Depends(json_body),
    db: AsyncSession = Depends(get_db)
):
    """创建文档"""
    data = DocumentCreate.model_validate(body)
    service = get_service(db, user)
    document = await service.create_document(data, background_tasks)

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=document.model_dump(),
        headers={"Location": f"/api/documents/{document.id}"},
        background=background_tasks
    )


@router.get("")
async def list_documents(
    user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取文档列表"""
    service = get_service(db, user)
    documents = await service.get_documents()
    return [d.model_dump() for d in documents]


# ============ 文档标签接口 ============

@document_tags_router.post("")
async def create_document_tag(
    user: AuthContext = Depends(get_current_user),
    body: dict = Depends(json_body),
    db: AsyncSession = Depends(get_db)
):
    """创建文档标签"""
    data = DocumentTagCreate.model_validate(body)
    service = get_service(db, user)
    document_tag = await service.create_document_tag(data)
    await db.commit()

    content = DocumentTagInfo.model_validate(document_tag).model_dump()
    content["user_id"] = document_tag.user_id
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=content,
        headers={"Location": f"/api/document_tags/{document_tag.id}"}
    )


@document_tags_router.get("")
async def list_document_tags(
    user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取文档标签列表"""
    service = get_service(db, user)
    document_tags = await service.get_document_tags()
    return [DocumentTagInfo.model_validate(t).model_dump() for t in document_tags]
