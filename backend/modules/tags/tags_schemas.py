"""
标签数据验证模式
请求体字段由 field_validator 逐个校验，响应结构区分单个读取与列表读取
"""

import re
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, field_validator

from core.errors import UnprocessableException, UnsupportedMediaException
from utils.validators import DEFAULT_THEME_COLOR, RequestBody, UpdateBody, json_text, to_int

HEX_COLOR_PATTERN = re.compile(r"^([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

GRAPH_TYPES = ("sum", "flat")


# ============ 字段转换 ============

def parse_theme_color(value: Any) -> str:
    """主题色：3 位或 6 位十六进制，不带 #"""
    if not isinstance(value, str) or not HEX_COLOR_PATTERN.match(value):
        raise UnprocessableException("theme_color")
    return value


def parse_parent_id(value: Any) -> Optional[int]:
    """父标签 ID：null 表示无父标签，其余必须为数字"""
    if value is None:
        return None
    parent_id = to_int(value)
    if parent_id is None:
        raise UnprocessableException("parent_id")
    return parent_id


def parse_flag(value: Any, field: str) -> bool:
    """布尔标志：接受 true/false 与 0/1"""
    if isinstance(value, bool):
        return value
    number = to_int(value)
    if number not in (0, 1):
        raise UnprocessableException(field)
    return bool(number)


def parse_graph_type(value: Any) -> str:
    """图表类型：sum / flat，不区分大小写"""
    graph_type = json_text(value).lower()
    if graph_type not in GRAPH_TYPES:
        raise UnsupportedMediaException("default_graph_type")
    return graph_type


# ============ 标签 ============

class TagCreate(RequestBody):
    """创建标签"""
    name: str
    theme_color: str = DEFAULT_THEME_COLOR
    parent_id: Optional[int] = None
    pinned: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return json_text(v)

    @field_validator("theme_color", mode="before")
    @classmethod
    def validate_theme_color(cls, v):
        return parse_theme_color(v)

    @field_validator("parent_id", mode="before")
    @classmethod
    def validate_parent_id(cls, v):
        return parse_parent_id(v)

    @field_validator("pinned", mode="before")
    @classmethod
    def validate_pinned(cls, v):
        """按真值处理"""
        return bool(v)


class TagUpdate(UpdateBody):
    """更新标签（只允许以下字段）"""
    name: Optional[str] = None
    theme_color: Optional[str] = None
    parent_id: Optional[int] = None
    pinned: Optional[bool] = None
    order: Optional[int] = None
    hidden: Optional[bool] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        if not isinstance(v, str):
            raise UnprocessableException("name")
        return v

    @field_validator("theme_color", mode="before")
    @classmethod
    def validate_theme_color(cls, v):
        return parse_theme_color(v)

    @field_validator("parent_id", mode="before")
    @classmethod
    def validate_parent_id(cls, v):
        return parse_parent_id(v)

    @field_validator("order", mode="before")
    @classmethod
    def validate_order(cls, v):
        order = to_int(v)
        if order is None:
            raise UnprocessableException("order")
        return order

    @field_validator("pinned", "hidden", mode="before")
    @classmethod
    def validate_flags(cls, v, info):
        return parse_flag(v, info.field_name)

class SubTagInfo(BaseModel):
    """子标签（单个标签读取时内嵌）"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    theme_color: str
    pinned: bool
    order: int
    hidden: bool


class TagInfo(BaseModel):
    """标签信息"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    theme_color: str
    parent_id: Optional[int] = None
    pinned: bool
    order: int
    hidden: bool


class TagTreeNode(SubTagInfo):
    """列表中的顶层标签，tags 始终存在"""
    tags: List[TagInfo] = []


def tag_created(tag: Any) -> dict:
    """创建标签的响应体，无父标签时省略 parent_id"""
    data = {
        "id": tag.id,
        "name": tag.name,
        "theme_color": tag.theme_color,
        "parent_id": tag.parent_id,
        "user_id": tag.user_id,
        "pinned": tag.pinned,
    }
    if tag.parent_id is None:
        data.pop("parent_id")
    return data


def tag_detail(tag: Any, sub_tags: List[Any]) -> dict:
    """单个标签的响应体，没有子标签时省略 sub_tags"""
    data = TagInfo.model_validate(tag).model_dump()
    if sub_tags:
        data["sub_tags"] = [SubTagInfo.model_validate(t).model_dump() for t in sub_tags]
    return data


# ============ 记录方案 ============

class RecordSchemeCreate(RequestBody):
    """创建记录方案"""
    name: str
    unit_name: Optional[str] = None
    default_graph_type: str = "flat"

    @field_validator("name", "unit_name", mode="before")
    @classmethod
    def validate_text(cls, v):
        return json_text(v)

    @field_validator("default_graph_type", mode="before")
    @classmethod
    def validate_graph_type(cls, v):
        return parse_graph_type(v)


class RecordSchemeUpdate(UpdateBody):
    """更新记录方案（只允许以下字段）"""
    name: Optional[str] = None
    unit_name: Optional[str] = None
    default_graph_type: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return json_text(v)

    @field_validator("unit_name", mode="before")
    @classmethod
    def validate_unit_name(cls, v):
        """null 表示清除单位"""
        return json_text(v) if v is not None else None

    @field_validator("default_graph_type", mode="before")
    @classmethod
    def validate_graph_type(cls, v):
        return parse_graph_type(v)


class RecordSchemeInfo(BaseModel):
    """记录方案信息"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    unit_name: Optional[str] = None
    default_graph_type: str
