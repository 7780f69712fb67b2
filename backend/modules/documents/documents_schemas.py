"""
文档数据验证模式
"""

from typing import Any, List
from pydantic import BaseModel, ConfigDict, field_validator

from core.errors import UnsupportedMediaException
from modules.tags.tags_schemas import TagInfo
from utils.validators import RequestBody, json_array, json_text


class DocumentCreate(RequestBody):
    """创建文档"""
    title: str
    url: str
    tag_ids: List[Any] = []
    document_tag_ids: List[Any] = []

    @field_validator("title", "url", mode="before")
    @classmethod
    def validate_text(cls, v):
        return json_text(v)

    @field_validator("tag_ids", "document_tag_ids", mode="before")
    @classmethod
    def validate_ids(cls, v, info):
        return json_array(v, info.field_name, UnsupportedMediaException)


class DocumentTagCreate(RequestBody):
    """创建文档标签"""
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return json_text(v)


class DocumentTagInfo(BaseModel):
    """文档标签信息"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class DocumentInfo(BaseModel):
    """文档信息"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    tags: List[TagInfo] = []
    document_tags: List[DocumentTagInfo] = []
