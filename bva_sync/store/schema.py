"""SQLAlchemy tables for synced decisions and the sync status row.

``citation_number`` is the upsert key; re-syncing a decision rewrites its row.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

SYNC_METADATA_KEY = "latest"


class Base(DeclarativeBase):
    pass


class DecisionRow(Base):
    __tablename__ = "decisions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    citation_number: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)

    bva_api_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    decision_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    decision_type: Mapped[str] = mapped_column(String(16), nullable=False)
    docket_numbers: Mapped[Optional[list]] = mapped_column(JSON)
    source_url: Mapped[Optional[str]] = mapped_column(Text)
    filename: Mapped[Optional[str]] = mapped_column(String(255))

    outcome: Mapped[Optional[str]] = mapped_column(String(16))
    outcome_confidence: Mapped[Optional[float]] = mapped_column(Float)

    raw_text: Mapped[str] = mapped_column(Text, nullable=False)
    paragraphs: Mapped[list] = mapped_column(JSON, nullable=False)
    sections: Mapped[Optional[dict]] = mapped_column(JSON)

    synced_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    indexed: Mapped[bool] = mapped_column(Boolean, default=False)
    embedding_generated: Mapped[bool] = mapped_column(Boolean, default=False)


class SyncMetadataRow(Base):
    __tablename__ = "sync_metadata"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    last_sync_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    total_decisions: Mapped[int] = mapped_column(Integer, default=0)
    last_sync_status: Mapped[Optional[str]] = mapped_column(String(32))
    last_sync_error: Mapped[Optional[str]] = mapped_column(Text)
