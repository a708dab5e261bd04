from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from folio.core.db import Base
from folio.domains.content.entities import utcnow


class ContentItem(Base):
    __tablename__ = "content_items"
    __table_args__ = (UniqueConstraint("kind", "slug", name="uq_content_kind_slug"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    kind = Column(String(16), nullable=False, index=True)
    slug = Column(String(255), nullable=False)
    title = Column(String(255), nullable=False, default="")
    published_content = Column(Text, nullable=False, default="")
    draft_content = Column(Text, nullable=True)
    visible = Column(Boolean, nullable=False, default=False)
    project = Column(String(255), nullable=True)
    section = Column(String(255), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    history = relationship(
        "ContentHistory",
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(ContentHistory.id)",
    )


class ContentHistory(Base):
    __tablename__ = "content_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False, index=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    summary = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    item = relationship("ContentItem", back_populates="history")


class DocSection(Base):
    """Position of a documentation section within its project"""
    __tablename__ = "doc_sections"
    __table_args__ = (UniqueConstraint("project", "name", name="uq_doc_section_project_name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    project = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
