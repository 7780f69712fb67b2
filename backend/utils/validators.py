# -*- coding: utf-8 -*-
"""
请求字段校验工具
请求体由 pydantic 模型校验：缺少必填字段返回 400，
字段级错误由各模型的 field_validator 直接抛出对应状态码的业务异常
"""

import math
from typing import Any, Iterable, List, Optional, Type

from pydantic import BaseModel, model_validator
from pydantic_core import to_json

from core.errors import AppException, ValidationException, UnprocessableException

DEFAULT_THEME_COLOR = "ecf0f1"


def to_number(value: Any) -> Optional[float]:
    """
    将任意 JSON 值转换为有限数值

    支持数字、布尔值与数字字符串；无法转换、无穷大或 NaN 时返回 None
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_int(value: Any) -> Optional[int]:
    """转换为整数，非整数值返回 None"""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    number = to_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def coerce_ids(values: Iterable[Any]) -> List[int]:
    """
    将请求中的 ID 列表转换为整数列表

    无法转换的值直接丢弃（不报错），重复的 ID 只保留第一次出现
    """
    ids: List[int] = []
    seen = set()
    for value in values:
        coerced = to_int(value)
        if coerced is None or coerced in seen:
            continue
        seen.add(coerced)
        ids.append(coerced)
    return ids


def json_text(value: Any) -> str:
    """
    将 JSON 值转换为文本

    字符串原样返回，其余按 JSON 字面量书写（null、true、1.5 ...）
    """
    if isinstance(value, str):
        return value
    return to_json(value).decode()


def json_array(value: Any, field: str, error: Type[AppException]) -> list:
    """数组字段：不是数组时抛出 error（各资源使用的状态码不同）"""
    if not isinstance(value, list):
        raise error(field)
    return value


class RequestBody(BaseModel):
    """
    创建类请求体基类

    请求体必须是 JSON 对象，且包含全部必填字段，否则返回 400
    """

    @model_validator(mode="before")
    @classmethod
    def check_required(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValidationException()
        for name, field in cls.model_fields.items():
            if field.is_required() and name not in data:
                raise ValidationException()
        return data


class UpdateBody(BaseModel):
    """
    部分更新请求体基类

    只允许模型声明的字段：出现其他键时返回 422 并列出这些键，空对象返回 400
    """

    @model_validator(mode="before")
    @classmethod
    def check_columns(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValidationException()
        rejected = [key for key in data if key not in cls.model_fields]
        if rejected:
            raise UnprocessableException(message=f"Unprocessable entity ({', '.join(rejected)})")
        if not data:
            raise ValidationException()
        return data

    def changes(self) -> dict:
        """列名到新值的映射（仅包含请求中出现的字段）"""
        return self.model_dump(exclude_unset=True)
