"""Decision models for the search API payloads and the persisted record."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

DecisionType = Literal["AMA", "legacy"]
DecisionTypeFilter = Literal["AMA", "legacy", "all"]
SortOrder = Literal["date.desc", "date.asc"]


class Outcome(str, Enum):
    """Outcome labels assigned by the classifier."""

    GRANTED = "Granted"
    DENIED = "Denied"
    REMANDED = "Remanded"
    MIXED = "Mixed"
    UNKNOWN = "Unknown"


class DecisionSummary(BaseModel):
    """Search hit returned by the decisions search endpoint."""

    id: str
    citation_number: str
    date: str
    type: DecisionType
    docket_numbers: List[str] = Field(default_factory=list)
    url: str


class DecisionParagraph(BaseModel):
    """Paragraph of a decision as delivered by the detail endpoint."""

    section: Optional[str] = None
    text: str
    order: int


class DecisionDetail(DecisionSummary):
    """Full decision payload keyed by citation number."""

    paragraphs: List[DecisionParagraph] = Field(default_factory=list)
    raw_text: str
    filename: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class SearchParams(BaseModel):
    """Query parameters accepted by the search endpoint."""

    query: str = Field(..., min_length=1)
    decision_type: Optional[DecisionTypeFilter] = None
    start_year: Optional[int] = Field(default=None, ge=1990)
    end_year: Optional[int] = Field(default=None, le=2030)
    sort: Optional[SortOrder] = None
    offset: Optional[int] = Field(default=None, ge=0)
    limit: Optional[int] = Field(default=None, ge=1, le=100)


class SearchResult(BaseModel):
    """One page of search results."""

    offset: int
    limit: int
    has_more: bool
    count: int
    decisions: List[DecisionSummary] = Field(default_factory=list)


class CanonicalDecisionRecord(BaseModel):
    """Normalized decision as stored locally, one row per citation number."""

    id: str
    bva_api_id: str
    citation_number: str
    decision_date: datetime
    decision_type: DecisionType
    docket_numbers: List[str] = Field(default_factory=list)
    source_url: Optional[str] = None
    filename: Optional[str] = None
    raw_text: str
    paragraphs: List[DecisionParagraph] = Field(default_factory=list)
    sections: Dict[str, str] = Field(default_factory=dict)
    outcome: Optional[Outcome] = None
    outcome_confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    synced_at: datetime
    last_updated: datetime
    indexed: bool = False
    embedding_generated: bool = False
