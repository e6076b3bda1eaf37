"""Persistence for canonical decisions and the sync status row."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import Engine, create_engine, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from bva_sync.config import settings
from bva_sync.errors import DecisionSyncError, ErrorKind
from bva_sync.models.decision import CanonicalDecisionRecord
from bva_sync.models.sync import SyncMetadata
from bva_sync.store.schema import SYNC_METADATA_KEY, Base, DecisionRow, SyncMetadataRow

logger = logging.getLogger(__name__)

IMMUTABLE_DECISION_COLUMNS = {"id"}
SQLITE_PREFIX = "sqlite:///"


def sqlite_path(url: str) -> Optional[Path]:
    """File path behind a SQLite URL, or None for other backends and in-memory databases."""
    if not url.startswith(SQLITE_PREFIX):
        return None
    raw = url[len(SQLITE_PREFIX):]
    if not raw or raw == ":memory:":
        return None
    return Path(raw)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _record_to_values(record: CanonicalDecisionRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "citation_number": record.citation_number,
        "bva_api_id": record.bva_api_id,
        "decision_date": record.decision_date,
        "decision_type": record.decision_type,
        "docket_numbers": list(record.docket_numbers),
        "source_url": record.source_url,
        "filename": record.filename,
        "outcome": record.outcome.value if record.outcome else None,
        "outcome_confidence": record.outcome_confidence,
        "raw_text": record.raw_text,
        "paragraphs": [paragraph.model_dump() for paragraph in record.paragraphs],
        "sections": dict(record.sections),
        "synced_at": record.synced_at,
        "last_updated": record.last_updated,
        "indexed": record.indexed,
        "embedding_generated": record.embedding_generated,
    }


def _row_to_record(row: DecisionRow) -> CanonicalDecisionRecord:
    return CanonicalDecisionRecord(
        id=row.id,
        bva_api_id=row.bva_api_id,
        citation_number=row.citation_number,
        decision_date=_as_utc(row.decision_date),
        decision_type=row.decision_type,
        docket_numbers=row.docket_numbers or [],
        source_url=row.source_url,
        filename=row.filename,
        raw_text=row.raw_text,
        paragraphs=row.paragraphs or [],
        sections=row.sections or {},
        outcome=row.outcome,
        outcome_confidence=row.outcome_confidence,
        synced_at=_as_utc(row.synced_at),
        last_updated=_as_utc(row.last_updated),
        indexed=bool(row.indexed),
        embedding_generated=bool(row.embedding_generated),
    )


class DecisionStore:
    """SQL store keyed by citation number."""

    def __init__(self, database_url: str | None = None, engine: Engine | None = None) -> None:
        url = database_url or settings.database_url
        if engine is None:
            path = sqlite_path(url)
            if path is not None:
                path.parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(url)
        self.engine = engine
        self._session_factory = sessionmaker(self.engine, expire_on_commit=False)

    def _insert(self, table):
        if self.engine.dialect.name == "postgresql":
            return postgresql.insert(table)
        return sqlite.insert(table)

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        with self._session_factory() as session:
            try:
                yield session
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise DecisionSyncError(
                    f"Storage error while {action}: {exc}",
                    ErrorKind.STORAGE,
                    context={"action": action},
                ) from exc

    def create_schema(self) -> None:
        Base.metadata.create_all(self.engine)

    def get_by_citation(self, citation_number: str) -> Optional[CanonicalDecisionRecord]:
        with self._session("reading a decision") as session:
            row = session.scalar(
                select(DecisionRow).where(DecisionRow.citation_number == citation_number)
            )
            return _row_to_record(row) if row else None

    def exists(self, citation_number: str) -> bool:
        with self._session("checking a decision") as session:
            found = session.scalar(
                select(DecisionRow.id).where(DecisionRow.citation_number == citation_number)
            )
            return found is not None

    def count(self) -> int:
        with self._session("counting decisions") as session:
            return session.scalar(select(func.count()).select_from(DecisionRow)) or 0

    def list_citations(self) -> List[str]:
        with self._session("listing decisions") as session:
            rows = session.scalars(
                select(DecisionRow.citation_number).order_by(DecisionRow.citation_number)
            )
            return list(rows)

    def upsert_decision(self, record: CanonicalDecisionRecord) -> None:
        """Insert the decision, or overwrite the existing row for its citation number."""
        values = _record_to_values(record)
        stmt = self._insert(DecisionRow).values(**values)
        updates = {
            column: stmt.excluded[column]
            for column in values
            if column not in IMMUTABLE_DECISION_COLUMNS
        }
        updates["last_updated"] = datetime.now(timezone.utc)
        stmt = stmt.on_conflict_do_update(
            index_elements=[DecisionRow.citation_number],
            set_=updates,
        )
        with self._session(f"upserting {record.citation_number}") as session:
            session.execute(stmt)
        logger.debug("Upserted decision %s", record.citation_number)

    def write_sync_metadata(self, metadata: SyncMetadata) -> None:
        """Overwrite the singleton status row."""
        values = {
            "id": SYNC_METADATA_KEY,
            "last_sync_date": metadata.last_sync_date,
            "total_decisions": metadata.total_decisions,
            "last_sync_status": metadata.last_sync_status,
            "last_sync_error": metadata.last_sync_error,
        }
        stmt = self._insert(SyncMetadataRow).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[SyncMetadataRow.id],
            set_={column: stmt.excluded[column] for column in values if column != "id"},
        )
        with self._session("writing sync metadata") as session:
            session.execute(stmt)

    def get_sync_metadata(self) -> Optional[SyncMetadata]:
        with self._session("reading sync metadata") as session:
            row = session.get(SyncMetadataRow, SYNC_METADATA_KEY)
            if row is None:
                return None
            return SyncMetadata(
                id=row.id,
                last_sync_date=_as_utc(row.last_sync_date),
                total_decisions=row.total_decisions or 0,
                last_sync_status=row.last_sync_status,
                last_sync_error=row.last_sync_error,
            )
