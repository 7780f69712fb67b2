"""
标准错误码体系
提供统一的错误码定义和异常处理
"""

import logging
from typing import Optional, Any, Dict
from enum import IntEnum
from fastapi import status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorCode(IntEnum):
    """
    标准错误码

    错误码规范：
    - 0: 成功
    - 1xxx: 系统级错误
    - 2xxx: 认证/授权错误
    - 3xxx: 业务通用错误
    """

    # ==================== 成功 ====================
    SUCCESS = 0

    # ==================== 系统级错误 (1xxx) ====================
    INTERNAL_ERROR = 1000           # 服务器内部错误
    DATABASE_ERROR = 1001           # 数据库错误
    CONFIG_ERROR = 1003             # 配置错误

    # ==================== 认证/授权错误 (2xxx) ====================
    UNAUTHORIZED = 2001             # 未携带令牌
    TOKEN_INVALID = 2003            # 令牌无效
    LOGIN_FAILED = 2007             # 登录失败

    # ==================== 业务通用错误 (3xxx) ====================
    VALIDATION_ERROR = 3001         # 缺少必填字段 / 请求体格式错误
    RESOURCE_NOT_FOUND = 3002       # 资源不存在
    UNSUPPORTED_MEDIA_TYPE = 3013   # 不支持的媒体类型或字段值
    UNPROCESSABLE_ENTITY = 3014     # 无法处理的字段值
    METHOD_NOT_ALLOWED = 3015       # 方法不允许


# 错误码对应的默认消息
ERROR_MESSAGES: Dict[int, str] = {
    ErrorCode.SUCCESS: "Success",
    ErrorCode.INTERNAL_ERROR: "Internal server error",
    ErrorCode.DATABASE_ERROR: "Error: Query execution failed.",
    ErrorCode.CONFIG_ERROR: "Error: JWT secret does not exist",
    ErrorCode.UNAUTHORIZED: "Unauthorized",
    ErrorCode.TOKEN_INVALID: "Unauthorized",
    ErrorCode.LOGIN_FAILED: "Incorrect email or password",
    ErrorCode.VALIDATION_ERROR: "Invalid request",
    ErrorCode.RESOURCE_NOT_FOUND: "Page not found",
    ErrorCode.UNSUPPORTED_MEDIA_TYPE: "Unsupported media type",
    ErrorCode.UNPROCESSABLE_ENTITY: "Unprocessable entity",
    ErrorCode.METHOD_NOT_ALLOWED: "Method not allowed",
}

# 错误码对应的 HTTP 状态码
ERROR_HTTP_STATUS: Dict[int, int] = {
    ErrorCode.SUCCESS: status.HTTP_200_OK,

    # 系统级 -> 500
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.DATABASE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.CONFIG_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,

    # 认证 -> 401
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.TOKEN_INVALID: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.LOGIN_FAILED: status.HTTP_401_UNAUTHORIZED,

    # 业务通用 -> 400/404/405/415/422
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.METHOD_NOT_ALLOWED: status.HTTP_405_METHOD_NOT_ALLOWED,
    ErrorCode.UNSUPPORTED_MEDIA_TYPE: status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    ErrorCode.UNPROCESSABLE_ENTITY: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


class AppException(Exception):
    """
    应用异常基类

    用于抛出业务异常，包含错误码和详细信息

    Usage:
        raise AppException(ErrorCode.RESOURCE_NOT_FOUND, "Tag not found")
        raise AppException(ErrorCode.UNPROCESSABLE_ENTITY, "Unprocessable entity (theme_color)")
    """

    def __init__(
        self,
        code: int = ErrorCode.INTERNAL_ERROR,
        message: Optional[str] = None,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "Unknown error")
        self.data = data
        self.headers = headers
        self.http_status = ERROR_HTTP_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        """转换为 JSONResponse"""
        return JSONResponse(
            status_code=self.http_status,
            content=self.to_dict(),
            headers=self.headers
        )

    def to_dict(self) -> dict:
        """转换为字典"""
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data
        }


class ValidationException(AppException):
    """缺少必填字段 / 请求体不合法（400）"""

    def __init__(self, message: str = "Invalid request"):
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message)


class UnsupportedMediaException(AppException):
    """不支持的媒体类型或字段值（415）"""

    def __init__(self, field: Optional[str] = None):
        message = f"Unprocessable entity ({field})" if field else "Unsupported media type"
        super().__init__(code=ErrorCode.UNSUPPORTED_MEDIA_TYPE, message=message)


class UnprocessableException(AppException):
    """无法处理的字段值（422）"""

    def __init__(self, field: Optional[str] = None, message: Optional[str] = None):
        if message is None:
            message = f"Unprocessable entity ({field})" if field else None
        super().__init__(code=ErrorCode.UNPROCESSABLE_ENTITY, message=message)


class AuthException(AppException):
    """认证异常，附带 WWW-Authenticate 质询头"""

    def __init__(
        self,
        code: int = ErrorCode.UNAUTHORIZED,
        message: Optional[str] = None
    ):
        reason = "token_required" if code == ErrorCode.UNAUTHORIZED else "invalid_token"
        super().__init__(
            code=code,
            message=message,
            headers={"WWW-Authenticate": f'Bearer error="{reason}"'}
        )


class ConfigException(AppException):
    """服务端配置错误（500，区别于客户端认证失败）"""

    def __init__(self, message: Optional[str] = None):
        super().__init__(code=ErrorCode.CONFIG_ERROR, message=message)


class NotFoundException(AppException):
    """资源不存在异常"""

    def __init__(self, resource: str = "Page", resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            if isinstance(resource_id, (list, tuple)):
                resource_id = ",".join(str(i) for i in resource_id)
            message = f"{resource} not found (id: {resource_id})"
        super().__init__(
            code=ErrorCode.RESOURCE_NOT_FOUND,
            message=message
        )


class QueryException(AppException):
    """存储层返回了意料之外的结果"""

    def __init__(self, message: str = "Error: Query returned unsupported response"):
        super().__init__(code=ErrorCode.DATABASE_ERROR, message=message)


# ==================== 异常处理器 ====================

def register_exception_handlers(app):
    """
    注册异常处理器

    在 main.py 中调用：
        from core.errors import register_exception_handlers
        register_exception_handlers(app)
    """
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException as StarletteHTTPException

    @app.exception_handler(AppException)
    async def handle_app_exception(request, exc: AppException):
        return exc.to_response()

    @app.exception_handler(SQLAlchemyError)
    async def handle_query_error(request, exc: SQLAlchemyError):
        logger.error(f"查询执行失败: {request.method} {request.url.path} | {exc}")
        message = str(exc.orig) if getattr(exc, "orig", None) is not None else str(exc)
        return QueryException(message or ERROR_MESSAGES[ErrorCode.DATABASE_ERROR]).to_response()

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            errors.append({
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"]
            })

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "code": ErrorCode.VALIDATION_ERROR,
                "message": "Invalid request",
                "data": {"errors": errors}
            }
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request, exc: StarletteHTTPException):
        # 映射 HTTP 状态码到业务错误码
        code_mapping = {
            401: ErrorCode.UNAUTHORIZED,
            404: ErrorCode.RESOURCE_NOT_FOUND,
            405: ErrorCode.METHOD_NOT_ALLOWED,
            415: ErrorCode.UNSUPPORTED_MEDIA_TYPE,
            500: ErrorCode.INTERNAL_ERROR,
        }

        code = code_mapping.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
        message = ERROR_MESSAGES.get(code) if code in code_mapping.values() else str(exc.detail)

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "code": code,
                "message": message,
                "data": None
            },
            headers=getattr(exc, "headers", None)
        )
