"""
期间数据验证模式
期间的字段错误统一返回 422
"""

from datetime import date
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, field_validator

from core.errors import UnprocessableException
from modules.tags.tags_schemas import TagInfo
from utils.dates import parse_calendar_date
from utils.validators import RequestBody, json_array, json_text, to_int


class TermCreate(RequestBody):
    """创建期间"""
    name: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    start: date
    end: date
    tag_ids: List[Any] = []

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return json_text(v)

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v):
        return json_text(v) if v is not None else None

    @field_validator("parent_id", mode="before")
    @classmethod
    def validate_parent_id(cls, v):
        if v is None:
            return None
        parent_id = to_int(v)
        if parent_id is None:
            raise UnprocessableException("parent_id")
        return parent_id

    @field_validator("start", "end", mode="before")
    @classmethod
    def validate_dates(cls, v, info):
        """起止日期，MM-DD 补全为当年"""
        parsed = parse_calendar_date(v)
        if parsed is None:
            raise UnprocessableException(info.field_name)
        return parsed

    @field_validator("tag_ids", mode="before")
    @classmethod
    def validate_tag_ids(cls, v):
        return json_array(v, "tag_ids", UnprocessableException)


class SubTermInfo(BaseModel):
    """子期间"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    start: date
    end: date


class TermBrief(SubTermInfo):
    """其他资源引用的期间"""
    parent_id: Optional[int] = None


class TermInfo(SubTermInfo):
    """顶层期间，附带标签与子期间"""
    tags: List[TagInfo] = []
    sub_terms: List[SubTermInfo] = []


def term_created(term: Any, tags: List[Any]) -> dict:
    """创建期间的响应体，无父期间时省略 parent_id"""
    data = {
        "id": term.id,
        "user_id": term.user_id,
        "name": term.name,
        "description": term.description,
        "start": term.start.isoformat(),
        "end": term.end.isoformat(),
    }
    if term.parent_id is not None:
        data["parent_id"] = term.parent_id
    data["tags"] = [TagInfo.model_validate(t).model_dump() for t in tags]
    return data
