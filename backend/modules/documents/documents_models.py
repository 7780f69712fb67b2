"""
文档数据模型
文档可同时关联标签（tags）与文档标签（document_tags）两套分类
"""

from sqlalchemy import String, Integer, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


class Document(Base):
    """文档"""
    __tablename__ = "documents"
    __table_args__ = {"extend_existing": True, "comment": "文档表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    url: Mapped[str] = mapped_column(Text)


class DocumentTag(Base):
    """文档标签（平铺，无层级）"""
    __tablename__ = "document_tags"
    __table_args__ = {"extend_existing": True, "comment": "文档标签表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(String(100))


class DocumentTagMap(Base):
    """文档与标签关联"""
    __tablename__ = "document_tag_maps"
    __table_args__ = {"extend_existing": True, "comment": "文档与标签关联表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(Integer, ForeignKey("documents.id"), index=True)
    tag_id: Mapped[int] = mapped_column(Integer, ForeignKey("tags.id"), index=True)


class DocumentDocumentTagMap(Base):
    """文档与文档标签关联"""
    __tablename__ = "document_document_tag_maps"
    __table_args__ = {"extend_existing": True, "comment": "文档与文档标签关联表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[int] = mapped_column(Integer, ForeignKey("documents.id"), index=True)
    document_tag_id: Mapped[int] = mapped_column(Integer, ForeignKey("document_tags.id"), index=True)
