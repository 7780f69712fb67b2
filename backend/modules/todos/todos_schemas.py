"""
待办数据验证模式
待办的字段错误统一返回 415，可选字段为 null 时视为未提供
"""

import datetime as dt
from typing import Any, List, Optional
from pydantic import BaseModel, field_validator

from core.errors import UnsupportedMediaException
from modules.tags.tags_schemas import TagInfo
from modules.terms.terms_schemas import TermBrief
from utils.dates import TODO_DATE_PATTERN, parse_calendar_date, is_valid_time
from utils.validators import RequestBody, json_array, json_text, to_int, to_number


class TodoCreate(RequestBody):
    """创建待办"""
    name: str
    description: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[str] = None
    execution_time: Optional[float] = None
    term_id: Optional[int] = None
    tag_ids: List[Any] = []

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return json_text(v)

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v):
        return json_text(v) if v is not None else None

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        if v is None:
            return None
        parsed = parse_calendar_date(v, TODO_DATE_PATTERN)
        if parsed is None:
            raise UnsupportedMediaException("date")
        return parsed

    @field_validator("time", mode="before")
    @classmethod
    def validate_time(cls, v):
        if v is not None and not is_valid_time(v):
            raise UnsupportedMediaException("time")
        return v

    @field_validator("execution_time", mode="before")
    @classmethod
    def validate_execution_time(cls, v):
        if v is None:
            return None
        execution_time = to_number(v)
        if execution_time is None:
            raise UnsupportedMediaException("execution_time")
        return execution_time

    @field_validator("term_id", mode="before")
    @classmethod
    def validate_term_id(cls, v):
        if v is None:
            return None
        term_id = to_int(v)
        if term_id is None:
            raise UnsupportedMediaException("term_id")
        return term_id

    @field_validator("tag_ids", mode="before")
    @classmethod
    def validate_tag_ids(cls, v):
        return json_array(v, "tag_ids", UnsupportedMediaException)


class TodoInfo(BaseModel):
    """待办信息，term 仅在关联了期间时出现"""
    id: int
    name: str
    description: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[str] = None
    execution_time: Optional[float] = None
    tags: List[TagInfo] = []
    term: Optional[TermBrief] = None

    def to_response(self) -> dict:
        data = self.model_dump(mode="json")
        if self.term is None:
            data.pop("term")
        return data
