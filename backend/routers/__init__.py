"""
系统级路由
"""

from . import auth, health

__all__ = ["auth", "health"]
