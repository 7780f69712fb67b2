"""
标签数据模型
标签支持一级父子结构（parent_id 自引用），所有记录按 user_id 严格隔离
"""

from typing import Optional
from sqlalchemy import String, Integer, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class Tag(Base):
    """标签"""
    __tablename__ = "tags"
    __table_args__ = {"extend_existing": True, "comment": "标签表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # 所属用户（每个用户有自己的标签体系）
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)

    name: Mapped[str] = mapped_column(String(100))
    theme_color: Mapped[str] = mapped_column(String(6), default="ecf0f1")  # 3 位或 6 位十六进制

    # 父标签（查询只展开一层）
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("tags.id"),
        nullable=True,
        index=True
    )

    # 显示属性
    pinned: Mapped[bool] = mapped_column(Boolean, default=False)
    order: Mapped[int] = mapped_column(Integer, default=0)
    hidden: Mapped[bool] = mapped_column(Boolean, default=False)


class RecordScheme(Base):
    """标签下的自由记录方案"""
    __tablename__ = "free_record_schemes"
    __table_args__ = {"extend_existing": True, "comment": "自由记录方案表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tag_id: Mapped[int] = mapped_column(Integer, ForeignKey("tags.id"), index=True)
    name: Mapped[str] = mapped_column(String(100))
    unit_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    default_graph_type: Mapped[str] = mapped_column(String(10), default="flat")  # sum / flat
