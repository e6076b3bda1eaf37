"""Structured storage for synced decisions."""

from .repository import DecisionStore
from .schema import Base, DecisionRow, SyncMetadataRow

__all__ = ["Base", "DecisionRow", "DecisionStore", "SyncMetadataRow"]
