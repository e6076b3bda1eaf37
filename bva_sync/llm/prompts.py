"""Prompt templates for outcome classification."""

from __future__ import annotations

SYSTEM_PROMPT = """You analyze decisions of the Board of Veterans' Appeals (BVA).
Read the decision excerpt and classify the outcome of the appeal.
Respond only with a single JSON object. Do not add commentary outside the JSON."""


def build_outcome_prompt(citation_number: str, decision_date: str, excerpt: str) -> str:
    return f"""Analyze this BVA (Board of Veterans' Appeals) decision and determine the outcome.

Decision Citation: {citation_number}
Decision Date: {decision_date}

Decision Text (excerpt):
{excerpt}

Based on the decision text, classify the outcome as ONE of the following:
- "Granted" - The veteran's appeal was granted (approved)
- "Denied" - The veteran's appeal was denied
- "Remanded" - The case was sent back for additional development/evidence
- "Mixed" - Some issues granted, some denied/remanded

Also provide a confidence score from 0.0 to 1.0.

Respond ONLY with valid JSON in this exact format:
{{
  "outcome": "Granted" | "Denied" | "Remanded" | "Mixed",
  "confidence": 0.95,
  "reasoning": "Brief explanation of why you classified it this way"
}}"""
