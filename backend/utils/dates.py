# -*- coding: utf-8 -*-
"""
日期工具模块
支持完整日期（YYYY-MM-DD）与省略年份的月日（MM-DD）两种写法
"""

import re
from datetime import date
from typing import Optional

# 期间（term）使用的宽松格式
TERM_DATE_PATTERN = re.compile(r"^([0-9]{4}-[0-9]{2}-[0-9]{2}|[0-9]{2}-[0-9]{2})$")

# 待办（todo）使用的严格格式：'2000-01-01' - '9999-12-31' 或 '01-01' - '12-31'
TODO_DATE_PATTERN = re.compile(
    r"^([2-9][0-9]{3}-(0[1-9]|1[0-2])-([0-2][0-9]|3[0-1])|(0[1-9]|1[0-2])-([0-2][0-9]|3[0-1]))$"
)

MONTH_DAY_PATTERN = re.compile(r"^[0-9]{2}-[0-9]{2}$")

# '00:00' - '23:59'
TIME_PATTERN = re.compile(r"^(([0-1][0-9]|2[0-3]):[0-5][0-9])$")


def current_year() -> int:
    """获取当前年份（写入时刻）"""
    return date.today().year


def expand_month_day(value: str) -> str:
    """
    将 MM-DD 补全为当年的 YYYY-MM-DD，完整日期原样返回

    Args:
        value: 已通过格式校验的日期字符串
    """
    if MONTH_DAY_PATTERN.match(value):
        return f"{current_year()}-{value}"
    return value


def parse_calendar_date(value: object, pattern: re.Pattern = TERM_DATE_PATTERN) -> Optional[date]:
    """
    解析日期字符串

    格式不符或日期不存在（如平年的 02-29）时返回 None，不会顺延到下个月

    Args:
        value: 请求中的原始值
        pattern: 允许的格式
    """
    if not isinstance(value, str) or not pattern.match(value):
        return None
    try:
        return date.fromisoformat(expand_month_day(value))
    except ValueError:
        return None


def is_valid_time(value: object) -> bool:
    """校验 HH:MM 时间格式"""
    return isinstance(value, str) and TIME_PATTERN.match(value) is not None
