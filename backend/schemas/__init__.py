"""
数据验证模式目录
"""

from .auth import UserCreate, UserLogin

__all__ = [
    # 认证
    "UserCreate", "UserLogin",
]
