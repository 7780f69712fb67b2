"""
待办数据模型
"""

import datetime as dt
from typing import Optional
from sqlalchemy import String, Integer, Float, Text, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class Todo(Base):
    """待办事项"""
    __tablename__ = "todos"
    __table_args__ = {"extend_existing": True, "comment": "待办表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[Optional[dt.date]] = mapped_column(Date, nullable=True)
    time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)  # HH:MM
    execution_time: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # 分钟
    term_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("terms.id"),
        nullable=True,
        index=True
    )


class TodoTagMap(Base):
    """待办与标签关联"""
    __tablename__ = "todo_tag_maps"
    __table_args__ = {"extend_existing": True, "comment": "待办与标签关联表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    todo_id: Mapped[int] = mapped_column(Integer, ForeignKey("todos.id"), index=True)
    tag_id: Mapped[int] = mapped_column(Integer, ForeignKey("tags.id"), index=True)
