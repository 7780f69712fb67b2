"""
工具函数目录
按功能分类组织
"""

from .dates import parse_calendar_date, expand_month_day, is_valid_time
from .validators import coerce_ids, to_int, to_number, json_text, json_array, RequestBody, UpdateBody
from .request import get_client_ip, json_body, parse_path_id

__all__ = [
    # 日期处理
    "parse_calendar_date",
    "expand_month_day",
    "is_valid_time",
    # 字段校验
    "coerce_ids",
    "to_int",
    "to_number",
    "json_text",
    "json_array",
    "RequestBody",
    "UpdateBody",
    # 请求处理
    "get_client_ip",
    "json_body",
    "parse_path_id",
]
