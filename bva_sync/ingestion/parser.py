"""Convert decision payloads into canonical records."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from bva_sync.models.decision import CanonicalDecisionRecord, DecisionDetail, DecisionParagraph

logger = logging.getLogger(__name__)

DEFAULT_SECTION = "content"
KEY_SECTIONS = ("findings_of_fact", "reasons_and_bases", "analysis", "conclusion")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string, treating naive values as UTC."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def normalize_section_name(section_name: str) -> str:
    """Map common section headings to a fixed vocabulary."""
    name = section_name.lower().strip()
    if "introduction" in name or "intro" in name:
        return "introduction"
    if "finding" in name or "fact" in name:
        return "findings_of_fact"
    if "analysis" in name or "discussion" in name:
        return "analysis"
    if "reason" in name and "base" in name:
        return "reasons_and_bases"
    if "conclusion" in name or "order" in name:
        return "conclusion"
    if "evidence" in name:
        return "evidence"
    if "procedural" in name:
        return "procedural_history"
    return section_name


def group_sections(paragraphs: Iterable[DecisionParagraph]) -> Dict[str, str]:
    """Concatenate paragraph text per normalized section, in paragraph order."""
    buckets: Dict[str, List[str]] = {}
    for paragraph in sorted(paragraphs, key=lambda p: p.order):
        key = normalize_section_name(paragraph.section) if paragraph.section else DEFAULT_SECTION
        buckets.setdefault(key, []).append(paragraph.text)
    return {key: "\n\n".join(texts).strip() for key, texts in buckets.items()}


def identify_section_types(paragraphs: Iterable[DecisionParagraph]) -> List[str]:
    """Distinct raw section labels in first-seen order."""
    seen: List[str] = []
    for paragraph in paragraphs:
        if paragraph.section and paragraph.section not in seen:
            seen.append(paragraph.section)
    return seen


def extract_key_sections(sections: Dict[str, str]) -> Dict[str, str]:
    """Pick the sections most useful for analysis, or all of them if none match."""
    key_sections = {name: sections[name] for name in KEY_SECTIONS if sections.get(name)}
    return key_sections or dict(sections)


def parse_decision(detail: DecisionDetail, now: datetime | None = None) -> CanonicalDecisionRecord:
    """Build the canonical record for a decision. Outcome fields stay unset."""
    now = now or datetime.now(timezone.utc)
    decision_date = parse_timestamp(detail.date)
    if decision_date is None:
        raise ValueError(f"Invalid decision date {detail.date!r} for {detail.citation_number}")
    last_updated = parse_timestamp(detail.updated_at) or now

    sections = group_sections(detail.paragraphs)
    logger.debug(
        "Parsed %s into %s sections from %s paragraphs",
        detail.citation_number,
        len(sections),
        len(detail.paragraphs),
    )
    return CanonicalDecisionRecord(
        id=str(uuid.uuid4()),
        bva_api_id=detail.id,
        citation_number=detail.citation_number,
        decision_date=decision_date,
        decision_type=detail.type,
        docket_numbers=list(detail.docket_numbers),
        source_url=detail.url,
        filename=detail.filename,
        raw_text=detail.raw_text,
        paragraphs=list(detail.paragraphs),
        sections=sections,
        synced_at=now,
        last_updated=last_updated,
    )
