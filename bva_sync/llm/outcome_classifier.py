"""Label decision outcomes with a generative model."""

from __future__ import annotations

import logging
import re
from typing import Literal, Optional, Protocol

from pydantic import BaseModel, ValidationError

from bva_sync.config import settings
from bva_sync.llm.openai_client import OpenAIChatClient
from bva_sync.llm.prompts import SYSTEM_PROMPT, build_outcome_prompt
from bva_sync.models.decision import Outcome
from bva_sync.models.sync import OutcomeResult

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.5
CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(?P<body>.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class ChatClient(Protocol):
    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = ...,
        max_output_tokens: int = ...,
        json_mode: bool = ...,
    ) -> str: ...


class OutcomeResponse(BaseModel):
    """Shape the model is asked to return."""

    outcome: Literal["Granted", "Denied", "Remanded", "Mixed"]
    confidence: Optional[float] = None
    reasoning: Optional[str] = None


def parse_outcome_response(raw: Optional[str]) -> OutcomeResult:
    """Validate the model's JSON answer. Raises ``ValueError`` on a bad shape."""
    text = (raw or "").strip()
    match = CODE_FENCE_PATTERN.match(text)
    if match:
        text = match.group("body")
    if not text:
        raise ValueError("Empty classification response")
    response = OutcomeResponse.model_validate_json(text)
    confidence = DEFAULT_CONFIDENCE if response.confidence is None else response.confidence
    return OutcomeResult(
        outcome=Outcome(response.outcome),
        confidence=min(max(confidence, 0.0), 1.0),
        reasoning=response.reasoning,
    )


class OutcomeClassifier:
    """Classifies a decision as Granted, Denied, Remanded or Mixed.

    Never raises: any failure of the call or of the response yields
    ``Unknown`` with confidence 0.0.
    """

    def __init__(
        self,
        client: ChatClient | None = None,
        excerpt_chars: int | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> None:
        self.client = client or OpenAIChatClient()
        self.excerpt_chars = excerpt_chars or settings.outcome_excerpt_chars
        self.temperature = settings.outcome_temperature if temperature is None else temperature
        self.max_output_tokens = max_output_tokens or settings.outcome_max_tokens

    def build_prompt(self, citation_number: str, decision_date: str, raw_text: str) -> str:
        return build_outcome_prompt(citation_number, decision_date, raw_text[: self.excerpt_chars])

    def classify(self, citation_number: str, decision_date: str, raw_text: str) -> OutcomeResult:
        prompt = self.build_prompt(citation_number, decision_date, raw_text)
        try:
            raw = self.client.complete(
                SYSTEM_PROMPT,
                prompt,
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
                json_mode=True,
            )
        except Exception as exc:
            logger.warning("Outcome classification call failed for %s: %s", citation_number, exc)
            return OutcomeResult.unknown()

        try:
            result = parse_outcome_response(raw)
        except (ValidationError, ValueError) as exc:
            logger.warning(
                "Unparseable classification for %s: %s (response: %.200s)",
                citation_number,
                exc,
                raw,
            )
            return OutcomeResult.unknown()

        logger.debug(
            "Classified %s as %s (%.2f): %s",
            citation_number,
            result.outcome.value,
            result.confidence,
            result.reasoning,
        )
        return result
