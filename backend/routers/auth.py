"""
认证路由
用户注册与登录，成功后通过 Cookie 下发令牌
"""

import logging
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from core.database import get_db
from core.errors import AppException, ErrorCode, UnprocessableException
from core.security import hash_password, verify_password, create_token, set_auth_cookie
from models import User
from schemas import UserCreate, UserLogin
from utils.request import get_client_ip, json_body

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["认证"])


@router.post("/users")
async def register(body: dict = Depends(json_body), db: AsyncSession = Depends(get_db)):
    """用户注册"""
    data = UserCreate.model_validate(body)

    # 检查邮箱是否已注册
    result = await db.execute(select(User).where(User.email == data.email))
    if result.scalar_one_or_none():
        raise UnprocessableException("email")

    user = User(
        name=data.name,
        email=data.email,
        password=hash_password(data.password)
    )
    db.add(user)
    await db.flush()

    # 未配置密钥时在提交前失败，用户不会被写入
    token = create_token(user.id)
    await db.commit()
    logger.info(f"用户已注册: id={user.id}")

    response = JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"message": "Success", "user_name": user.name},
        headers={"Location": f"/api/users/{user.id}"}
    )
    set_auth_cookie(response, token)
    return response


@router.post("/login")
async def login(request: Request, body: dict = Depends(json_body), db: AsyncSession = Depends(get_db)):
    """用户登录"""
    data = UserLogin.model_validate(body)

    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()

    # 用户不存在或密码错误
    if not user or not verify_password(data.password, user.password):
        logger.warning(f"登录失败 - IP: {get_client_ip(request)}")
        raise AppException(ErrorCode.LOGIN_FAILED)

    response = JSONResponse(content={"message": "Success"})
    set_auth_cookie(response, create_token(user.id))
    return response
