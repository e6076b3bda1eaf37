"""Thin wrapper around the OpenAI SDK pointed at OpenRouter."""

from __future__ import annotations

import logging
from typing import Optional

from openai import OpenAI

from bva_sync.config import settings

logger = logging.getLogger(__name__)


class OpenAIChatClient:
    """Chat completion client for OpenAI-compatible endpoints."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        api_key = api_key or settings.openrouter_api_key
        if not api_key:
            raise ValueError("OPENROUTER_API_KEY is not configured in the environment.")
        self.model = model or settings.openrouter_model_outcome
        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url or settings.openrouter_base_url,
            default_headers={
                "HTTP-Referer": settings.app_url,
                "X-Title": settings.app_title,
            },
        )

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_output_tokens: int = 4096,
        json_mode: bool = False,
    ) -> str:
        extra = {"response_format": {"type": "json_object"}} if json_mode else {}
        response = self.client.chat.completions.create(
            model=self.model,
            temperature=temperature,
            max_tokens=max_output_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            **extra,
        )
        if response.usage:
            logger.debug(
                "Token usage for %s: prompt=%s completion=%s",
                self.model,
                response.usage.prompt_tokens,
                response.usage.completion_tokens,
            )
        return self._extract_text(response)

    @staticmethod
    def _extract_text(response) -> str:
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        return (content or "").strip()
