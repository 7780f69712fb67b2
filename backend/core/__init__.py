"""
Flow Firmer 核心模块
提供配置、数据库、认证与错误处理等基础设施

导出列表：
- 配置管理: get_settings, Settings
- 数据库: Base, get_db, async_session
- 安全认证: get_current_user, AuthContext
- 错误处理: ErrorCode, AppException, register_exception_handlers
"""

# 配置管理
from .config import get_settings, Settings, reload_settings

# 数据库
from .database import Base, get_db, async_session, init_db, close_db

# 错误处理
from .errors import (
    ErrorCode,
    AppException,
    ValidationException,
    UnsupportedMediaException,
    UnprocessableException,
    AuthException,
    ConfigException,
    NotFoundException,
    register_exception_handlers
)


__all__ = [
    # 配置
    "get_settings",
    "Settings",
    "reload_settings",

    # 数据库
    "Base",
    "get_db",
    "async_session",
    "init_db",
    "close_db",

    # 错误
    "ErrorCode",
    "AppException",
    "ValidationException",
    "UnsupportedMediaException",
    "UnprocessableException",
    "AuthException",
    "ConfigException",
    "NotFoundException",
    "register_exception_handlers",
]
