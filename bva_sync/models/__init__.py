"""Typed models shared across the application."""

from .decision import (
    CanonicalDecisionRecord,
    DecisionDetail,
    DecisionParagraph,
    DecisionSummary,
    Outcome,
    SearchParams,
    SearchResult,
)
from .sync import OutcomeResult, SyncErrorEntry, SyncMetadata, SyncOptions, SyncRunSummary

__all__ = [
    "CanonicalDecisionRecord",
    "DecisionDetail",
    "DecisionParagraph",
    "DecisionSummary",
    "Outcome",
    "OutcomeResult",
    "SearchParams",
    "SearchResult",
    "SyncErrorEntry",
    "SyncMetadata",
    "SyncOptions",
    "SyncRunSummary",
]
