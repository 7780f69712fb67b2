"""
HTTP请求工具
"""

from typing import Any

from fastapi import Request

from core.errors import NotFoundException, UnsupportedMediaException, ValidationException
from .validators import to_int


def get_client_ip(request: Request) -> str:
    """
    获取客户端真实IP

    支持代理服务器（Nginx等）转发的请求
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # 取第一个IP（最原始的客户端IP）
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def is_json_request(request: Request) -> bool:
    """Content-Type 是否为 application/json（忽略 charset 等参数）"""
    content_type = request.headers.get("content-type")
    if content_type is None:
        return False
    return content_type.split(";")[0].strip().lower() == "application/json"


async def json_body(request: Request) -> Any:
    """
    读取 JSON 请求体（依赖注入用）

    未声明 application/json 时在读取请求体之前返回 415；无法解析时返回 400。
    是否为 JSON 对象由各请求体模型校验
    """
    if not is_json_request(request):
        raise UnsupportedMediaException()

    try:
        return await request.json()
    except ValueError:
        raise ValidationException()


def parse_path_id(value: str) -> int:
    """解析路径中的 ID，非数字返回 404"""
    resource_id = to_int(value)
    if resource_id is None:
        raise NotFoundException()
    return resource_id
