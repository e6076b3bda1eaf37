"""Run tracking models for the sync pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, computed_field

from .decision import DecisionTypeFilter, Outcome

SyncStatus = Literal["completed", "completed_with_errors"]

ERROR_SUMMARY_CITATIONS = 3


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncOptions(BaseModel):
    """Configuration for a single sync run."""

    query: Optional[str] = None
    start_year: Optional[int] = Field(default=None, ge=1990)
    end_year: Optional[int] = Field(default=None, le=2030)
    decision_type: DecisionTypeFilter = "all"
    max_decisions: int = Field(default=100, ge=1)
    skip_existing: bool = False
    extract_outcomes: bool = True


class OutcomeResult(BaseModel):
    """Classifier verdict. ``reasoning`` is kept for logs only."""

    outcome: Outcome
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: Optional[str] = None

    @classmethod
    def unknown(cls) -> "OutcomeResult":
        return cls(outcome=Outcome.UNKNOWN, confidence=0.0)


class SyncErrorEntry(BaseModel):
    """Failure recorded for a single decision during a run."""

    decision_id: str
    citation_number: str
    error: str
    kind: str = "unexpected"


class SyncRunSummary(BaseModel):
    """Statistics for one sync invocation."""

    total: int = 0
    synced: int = 0
    skipped: int = 0
    errors: List[SyncErrorEntry] = Field(default_factory=list)
    start_time: datetime = Field(default_factory=utcnow)
    end_time: Optional[datetime] = None
    duration_ms: Optional[int] = None

    @computed_field
    @property
    def status(self) -> SyncStatus:
        return "completed_with_errors" if self.errors else "completed"

    def record_error(
        self,
        decision_id: str,
        citation_number: str,
        error: str,
        kind: str = "unexpected",
    ) -> None:
        self.errors.append(
            SyncErrorEntry(
                decision_id=decision_id,
                citation_number=citation_number,
                error=error,
                kind=kind,
            )
        )

    def finalize(self) -> None:
        self.end_time = utcnow()
        delta = self.end_time - self.start_time
        self.duration_ms = int(delta.total_seconds() * 1000)

    def error_summary(self) -> Optional[str]:
        if not self.errors:
            return None
        citations = ", ".join(
            entry.citation_number for entry in self.errors[:ERROR_SUMMARY_CITATIONS]
        )
        return f"{len(self.errors)} errors: {citations}"


class SyncMetadata(BaseModel):
    """Singleton status row overwritten at the end of every run."""

    id: str = "latest"
    last_sync_date: Optional[datetime] = None
    total_decisions: int = 0
    last_sync_status: Optional[str] = None
    last_sync_error: Optional[str] = None

    @classmethod
    def from_summary(cls, summary: SyncRunSummary) -> "SyncMetadata":
        return cls(
            last_sync_date=summary.end_time or utcnow(),
            total_decisions=summary.synced,
            last_sync_status=summary.status,
            last_sync_error=summary.error_summary(),
        )
