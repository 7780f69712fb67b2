"""
统一鉴权模块
提供JWT令牌生成、验证和密码处理功能

令牌通过 Cookie 传递（优先 token，其次 TOKEN），服务端不保存会话状态
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union
import bcrypt
from jose import JWTError, jwt
from fastapi import Request, Response
from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr, ValidationError

from .config import get_settings
from .errors import AuthException, ConfigException, ErrorCode

Numeric = Union[StrictInt, StrictFloat]


class TokenClaims(BaseModel):
    """
    令牌声明
    签名有效但结构不符（缺字段、类型错误、签发者不符）的令牌一律视为无效
    """
    model_config = ConfigDict(extra="ignore")

    user_id: StrictInt
    iat: Numeric
    exp: Numeric
    iss: StrictStr


class AuthContext(BaseModel):
    """已认证的请求上下文，显式注入到各接口"""
    user_id: int


def hash_password(password: str) -> str:
    """
    加密密码
    bcrypt 限制密码长度不超过 72 字节
    """
    if not isinstance(password, str):
        password = str(password)

    password_bytes = password.encode('utf-8')[:72]
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    if not isinstance(plain_password, str):
        plain_password = str(plain_password)

    password_bytes = plain_password.encode('utf-8')[:72]
    hashed_bytes = hashed_password.encode('utf-8')

    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # 存储的摘要格式不正确
        return False


def _require_secret() -> str:
    """获取签名密钥，未配置时拒绝继续"""
    secret = get_settings().jwt_secret
    if not secret:
        raise ConfigException()
    return secret


def create_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """
    创建JWT令牌

    Args:
        user_id: 用户ID
        expires_delta: 过期时间增量，默认使用配置的天数
    """
    settings = get_settings()
    secret = _require_secret()

    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=settings.jwt_expire_days))

    to_encode = {
        "user_id": user_id,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
        "iss": settings.jwt_issuer,
    }
    return jwt.encode(to_encode, secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[TokenClaims]:
    """
    解码JWT令牌
    签名、过期时间、声明结构任一校验失败返回 None
    """
    settings = get_settings()
    secret = _require_secret()

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None

    if not isinstance(payload, dict) or payload.get("iss") != settings.jwt_issuer:
        return None

    try:
        return TokenClaims.model_validate(payload)
    except ValidationError:
        return None


def get_token_from_cookie(request: Request) -> Optional[str]:
    """从 Cookie 提取令牌，规范名称优先，大写名称兜底"""
    name = get_settings().token_cookie_name
    token = request.cookies.get(name)
    if token is None:
        token = request.cookies.get(name.upper())
    return token


def authenticate(token: Optional[str]) -> AuthContext:
    """校验令牌并返回认证上下文"""
    if token is None:
        raise AuthException(ErrorCode.UNAUTHORIZED)

    # 密钥检查在令牌存在性检查之后，缺失时返回 500 而非 401
    _require_secret()

    claims = decode_token(token)
    if claims is None:
        raise AuthException(ErrorCode.TOKEN_INVALID)

    return AuthContext(user_id=claims.user_id)


async def get_current_user(request: Request) -> AuthContext:
    """获取当前用户（依赖注入用）"""
    return authenticate(get_token_from_cookie(request))


def set_auth_cookie(response: Response, token: str) -> None:
    """写入认证 Cookie"""
    settings = get_settings()
    response.set_cookie(
        key=settings.token_cookie_name.upper(),
        value=token,
        max_age=settings.jwt_expire_days * 24 * 60 * 60,
        path="/",
        httponly=True
    )
