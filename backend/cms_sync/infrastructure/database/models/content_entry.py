"""SQLAlchemy ORM model for the ContentEntry entity."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from cms_sync.infrastructure.database.base import Base


class ContentEntryModel(Base):
    """ORM model — maps to the 'content_entries' table."""

    __tablename__ = "content_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    doc_id: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    content_type: Mapped[str] = mapped_column(String(50), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_content_entries_type", "content_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<ContentEntryModel(id={self.id}, "
            f"doc_id='{self.doc_id}', type='{self.content_type}')>"
        )
