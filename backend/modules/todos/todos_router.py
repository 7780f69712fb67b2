"""
待办API路由
"""

from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user, AuthContext
from utils.request import json_body

from .todos_schemas import TodoCreate
from .todos_services import TodosService

router = APIRouter()


def get_service(db: AsyncSession, user: AuthContext) -> TodosService:
    """创建待办服务实例"""
    return TodosService(db, user.user_id)


@router.post("")
async def create_todo(
    background_tasks: BackgroundTasks,
    user: AuthContext = Depends(get_current_user),
    body: dict = Depends(json_body),
    db: AsyncSession = Depends(get_db)
):
    """创建待办"""
    data = TodoCreate.model_validate(body)
    service = get_service(db, user)
    todo = await service.create_todo(data, background_tasks)

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=todo.to_response(),
        headers={"Location": f"/api/todos/{todo.id}"},
        background=background_tasks
    )


@router.get("")
async def list_todos(
    user: AuthContext = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """获取待办列表"""
    service = get_service(db, user)
    todos = await service.get_todos()
    return [t.to_response() for t in todos]
