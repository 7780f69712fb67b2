"""
系统配置管理
统一管理所有配置项，支持环境变量覆盖
"""

import logging
from pathlib import Path
from pydantic_settings import BaseSettings
from typing import Literal, Optional
from urllib.parse import quote_plus

# 获取backend目录的绝对路径
BACKEND_DIR = Path(__file__).parent.parent.resolve()
ENV_FILE = BACKEND_DIR / ".env"


class Settings(BaseSettings):
    """系统配置"""

    # 应用信息
    app_name: str = "Flow Firmer"
    app_version: str = "0.1.0"
    debug: bool = False

    # 数据库配置
    database_url: Optional[str] = None  # 设置后覆盖下方 MySQL 配置（测试使用 sqlite+aiosqlite）
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "root"
    db_password: str = ""
    db_name: str = "flow_firmer"

    @property
    def db_url(self) -> str:
        if self.database_url:
            return self.database_url
        encoded_user = quote_plus(self.db_user)
        encoded_pwd = quote_plus(self.db_password)
        return f"mysql+aiomysql://{encoded_user}:{encoded_pwd}@{self.db_host}:{self.db_port}/{self.db_name}"

    # JWT令牌配置
    jwt_secret: Optional[str] = None  # 未配置时拒绝所有认证请求
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "flow firmer"
    jwt_expire_days: int = 7

    # 认证 Cookie
    token_cookie_name: str = "token"

    # 关联表写入方式
    # background: 响应后由后台任务写入，失败仅记录日志
    # inline: 与主记录同一事务写入，失败时整体回滚
    association_write_mode: Literal["background", "inline"] = "background"

    # 跨域来源（逗号分隔）
    cors_origins: str = "*"

    class Config:
        env_file = str(ENV_FILE)
        env_file_encoding = "utf-8"


_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """
    获取配置单例
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()

        if not _settings_instance.jwt_secret:
            logging.getLogger("core.config").warning(
                "JWT_SECRET 未配置，所有需要认证的接口都将返回 500"
            )
    return _settings_instance


def reload_settings():
    """
    重新加载配置（测试中修改环境变量后使用）
    """
    global _settings_instance
    _settings_instance = Settings()
    return _settings_instance
