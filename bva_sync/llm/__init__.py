"""LLM integration helpers."""

from .openai_client import OpenAIChatClient
from .outcome_classifier import OutcomeClassifier, parse_outcome_response

__all__ = ["OpenAIChatClient", "OutcomeClassifier", "parse_outcome_response"]
