"""
Completion-backed helpers for tagging, describing, and explaining code.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Protocol

from pydantic import ValidationError as PydanticValidationError

from .config import DEFAULT_COMPLETION_MODEL, ENV_COMPLETION_MODEL
from .errors import ProviderError, ValidationError
from .models import CodeAnalysis
from .provider import build_genai_client, translate_provider_errors

logger = logging.getLogger(__name__)

MAX_ANALYZE_CHARS = 10_000

ANALYZE_SYSTEM_PROMPT = """
You are a code analysis expert. Analyze code and return ONLY a JSON object with this exact structure:
{
  "tags": ["tag1", "tag2", "tag3"],
  "description": "brief description of what the code does",
  "framework": "framework name if applicable, or null",
  "complexity": "simple|moderate|complex"
}
Return ONLY valid JSON, no markdown, no explanation.
"""

EXPLAIN_SYSTEM_PROMPT = (
    "You are a helpful coding instructor. "
    "Explain code clearly and concisely in 2-3 sentences."
)

FALLBACK_EXPLANATION = "Unable to explain code."

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?|```")


class Completer(Protocol):
    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        json_schema: dict[str, Any] | None = None,
        temperature: float = 0.3,
        max_output_tokens: int = 300,
    ) -> str:
        """Return the model's text reply for *prompt*."""


class GenAICompletionProvider:
    """Text completion via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = model or os.getenv(ENV_COMPLETION_MODEL, DEFAULT_COMPLETION_MODEL)
        if client is not None:
            self._client = client
        else:
            self._client = build_genai_client(api_key=api_key, timeout=timeout)

    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        json_schema: dict[str, Any] | None = None,
        temperature: float = 0.3,
        max_output_tokens: int = 300,
    ) -> str:
        config: dict[str, Any] = {
            "temperature": temperature,
            "max_output_tokens": max_output_tokens,
        }
        if system is not None:
            config["system_instruction"] = system
        if json_schema is not None:
            config["response_mime_type"] = "application/json"
            config["response_json_schema"] = json_schema

        with translate_provider_errors("completion"):
            response = self._client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        return (response.text or "").strip()


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences a model may wrap around JSON."""
    return _FENCE_RE.sub("", text).strip()


class CodeAssistant:
    """Analyze and explain snippets with a completion provider."""

    def __init__(self, completer: Completer) -> None:
        self.completer = completer

    def analyze_code(self, code: str, language: str) -> CodeAnalysis:
        if not code or not language:
            raise ValidationError("Code and language are required")
        if len(code) > MAX_ANALYZE_CHARS:
            raise ValidationError(
                f"Code is too long (max {MAX_ANALYZE_CHARS:,} characters)"
            )

        reply = self.completer.complete(
            f"Analyze this {language} code and provide tags, description, "
            f"framework, and complexity:\n\n{code}",
            system=ANALYZE_SYSTEM_PROMPT,
            json_schema=CodeAnalysis.model_json_schema(),
            temperature=0.3,
            max_output_tokens=300,
        )
        try:
            return CodeAnalysis.model_validate_json(strip_code_fences(reply) or "{}")
        except PydanticValidationError as exc:
            logger.warning("Could not parse code analysis reply: %s", exc)
            raise ProviderError("Provider returned an unreadable analysis") from exc

    def explain_code(self, code: str, language: str) -> str:
        if not code or not language:
            raise ValidationError("Code and language are required")
        reply = self.completer.complete(
            f"Explain what this {language} code does:\n\n{code}",
            system=EXPLAIN_SYSTEM_PROMPT,
            temperature=0.5,
            max_output_tokens=200,
        )
        return reply or FALLBACK_EXPLANATION
