"""SQLAlchemy table backing the document store.

Every collection lives in one table keyed by (collection, id). The document
body is a JSON column; the two timestamps are promoted to real columns so
pages can be ordered and continued with keyset cursors.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class DocumentRecord(Base):
    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(String(100), primary_key=True)
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    data: Mapped[Dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), default=dict
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("ix_documents_collection_created", "collection", "created_at", "id"),
        Index("ix_documents_collection_updated", "collection", "updated_at", "id"),
    )

    def __repr__(self) -> str:
        return f"<DocumentRecord {self.collection}/{self.id}>"
