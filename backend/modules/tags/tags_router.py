"""
标签API路由
RESTful风格，所有接口都需要认证且限定用户
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.errors import NotFoundException
from core.security import get_current_user, AuthContext
from utils.request import json_body, parse_path_id

from .tags_schemas import (
    TagCreate, TagUpdate, TagInfo, RecordSchemeCreate, RecordSchemeUpdate, RecordSchemeInfo,
    tag_created
)
from .tags_services import TagsService

router = APIRouter()


def get_service(db: AsyncSession, user: AuthContext) -> TagsService:
    """创建标签服务实例"""
    return TagsService(db, user.user_id)


# ============ 标签接口 ============

@router.post("")
async def create_tag(
    user: AuthContext = Depends(get_current_user),
    body: dict = Depends(json_body),
    db: AsyncSession = Depends(get_db)
):
    """创建标签"""
    data = TagCreate.model_validate(body)
    service = get_service(db, user)
    tag = await service.create_tag(data)
    await db.commit()

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=tag_created(tag),
        headers={"Location": f"/api/tags/{tag.id}"}
    )


@router.get("")
async def list_tags(
    show_hidden: bool = True,
    user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取顶层标签及其子标签"""
    service = get_service(db, user)
    tree = await service.get_tag_tree(show_hidden)
    return [node.model_dump() for node in tree]


@router.get("/{tag_id}")
async def get_tag(
    tag_id: str,
    user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取标签详情"""
    service = get_service(db, user)
    return await service.get_tag_detail(parse_path_id(tag_id))


@router.patch("/{tag_id}")
async def update_tag(
    tag_id: str,
    user: AuthContext = Depends(get_current_user),
    body: dict = Depends(json_body),
    db: AsyncSession = Depends(get_db)
):
    """更新标签"""
    resource_id = parse_path_id(tag_id)
    changes = TagUpdate.model_validate(body).changes()

    service = get_service(db, user)
    if not await service.update_tag(resource_id, changes):
        raise NotFoundException("Tag")
    await db.commit()
    return {"message": "Updated"}


@router.delete("/{tag_id}")
async def delete_tag(
    tag_id: str,
    user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """删除标签"""
    service = get_service(db, user)
    if not await service.delete_tag(parse_path_id(tag_id)):
        raise NotFoundException("Tag")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============ 记录方案接口 ============

@router.post("/{tag_id}/record_schemes")
async def create_record_scheme(
    tag_id: str,
    user: AuthContext = Depends(get_current_user),
    body: dict = Depends(json_body),
    db: AsyncSession = Depends(get_db)
):
    """在标签下创建记录方案"""
    service = get_service(db, user)
    tag = await service.get_owned_tag(parse_path_id(tag_id))
    data = RecordSchemeCreate.model_validate(body)
    scheme = await service.create_record_scheme(tag, data)
    await db.commit()

    content = RecordSchemeInfo.model_validate(scheme).model_dump()
    content["tag"] = TagInfo.model_validate(tag).model_dump()
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=content,
        headers={"Location": f"/api/tags/{tag.id}/record_schemes/{scheme.id}"}
    )


@router.get("/{tag_id}/record_schemes")
async def list_record_schemes(
    tag_id: str,
    user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取标签下的记录方案"""
    service = get_service(db, user)
    schemes = await service.get_record_schemes(parse_path_id(tag_id))
    return [RecordSchemeInfo.model_validate(s).model_dump() for s in schemes]


@router.get("/{tag_id}/record_schemes/{scheme_id}")
async def get_record_scheme(
    tag_id: str,
    scheme_id: str,
    user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取记录方案详情"""
    service = get_service(db, user)
    scheme = await service.get_record_scheme(parse_path_id(tag_id), parse_path_id(scheme_id))
    return RecordSchemeInfo.model_validate(scheme).model_dump()


@router.patch("/{tag_id}/record_schemes/{scheme_id}")
async def update_record_scheme(
    tag_id: str,
    scheme_id: str,
    user: AuthContext = Depends(get_current_user),
    body: dict = Depends(json_body),
    db: AsyncSession = Depends(get_db)
):
    """更新记录方案"""
    owner_id = parse_path_id(tag_id)
    resource_id = parse_path_id(scheme_id)
    changes = RecordSchemeUpdate.model_validate(body).changes()

    service = get_service(db, user)
    if not await service.update_record_scheme(owner_id, resource_id, changes):
        raise NotFoundException("RecordScheme")
    await db.commit()
    return {"message": "Updated"}


@router.delete("/{tag_id}/record_schemes/{scheme_id}")
async def delete_record_scheme(
    tag_id: str,
    scheme_id: str,
    user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """删除记录方案"""
    service = get_service(db, user)
    if not await service.delete_record_scheme(parse_path_id(tag_id), parse_path_id(scheme_id)):
        raise NotFoundException("RecordScheme")
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
