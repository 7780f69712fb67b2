"""
认证相关数据验证
"""

from pydantic import field_validator

from utils.validators import RequestBody, json_text


class UserCreate(RequestBody):
    """用户注册"""
    name: str
    email: str
    password: str

    @field_validator("name", "email", "password", mode="before")
    @classmethod
    def validate_text(cls, v):
        return json_text(v)


class UserLogin(RequestBody):
    """用户登录"""
    email: str
    password: str

    @field_validator("email", "password", mode="before")
    @classmethod
    def validate_text(cls, v):
        return json_text(v)
