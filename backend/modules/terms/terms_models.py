"""
期间数据模型
期间为带起止日期的命名区间，支持一级嵌套
"""

from datetime import date
from typing import Optional
from sqlalchemy import String, Integer, Text, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class Term(Base):
    """期间"""
    __tablename__ = "terms"
    __table_args__ = {"extend_existing": True, "comment": "期间表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start: Mapped[date] = mapped_column(Date)
    end: Mapped[date] = mapped_column(Date)
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("terms.id"),
        nullable=True,
        index=True
    )


class TermTagMap(Base):
    """期间与标签关联"""
    __tablename__ = "term_tag_maps"
    __table_args__ = {"extend_existing": True, "comment": "期间与标签关联表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    term_id: Mapped[int] = mapped_column(Integer, ForeignKey("terms.id"), index=True)
    tag_id: Mapped[int] = mapped_column(Integer, ForeignKey("tags.id"), index=True)
