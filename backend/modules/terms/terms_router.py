"""
期间API路由
"""

from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user, AuthContext
from utils.request import json_body

from .terms_schemas import TermCreate, term_created
from .terms_services import TermsService

router = APIRouter()


def get_service(db: AsyncSession, user: AuthContext) -> TermsService:
    """创建期间服务实例"""
    return TermsService(db, user.user_id)


@router.post("")
async def create_term(
    background_tasks: BackgroundTasks,
    user: AuthContext = Depends(get_current_user),
    body: dict = Depends(json_body),
    db: AsyncSession = Depends(get_db)
):
    """创建期间"""
    data = TermCreate.model_validate(body)
    service = get_service(db, user)
    term, tags = await service.create_term(data, background_tasks)

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=term_created(term, tags),
        headers={"Location": f"/api/terms/{term.id}"},
        background=background_tasks
    )


@router.get("")
async def list_terms(
    user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取期间列表"""
    service = get_service(db, user)
    terms = await service.get_terms()
    return [t.model_dump(mode="json") for t in terms]
