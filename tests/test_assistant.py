"""Tests for code analysis and explanation."""

from __future__ import annotations

import httpx
import pytest
from google.genai import types

from snippet_vault.assistant import (
    FALLBACK_EXPLANATION,
    MAX_ANALYZE_CHARS,
    CodeAssistant,
    GenAICompletionProvider,
    strip_code_fences,
)
from snippet_vault.errors import ProviderError, ProviderTimeoutError, ValidationError
from snippet_vault.models import CodeAnalysis

from .conftest import FakeGenAIClient, FakeGenerateModels


class _ScriptedCompleter:
    def __init__(self, reply: str = "") -> None:
        self.reply = reply
        self.calls: list[dict] = []

    def complete(self, prompt, *, system=None, json_schema=None, temperature=0.3, max_output_tokens=300):
        self.calls.append(
            {
                "prompt": prompt,
                "system": system,
                "json_schema": json_schema,
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            }
        )
        return self.reply


ANALYSIS_JSON = (
    '{"tags": ["timing", "utility"], "description": "Delays calls", '
    '"framework": null, "complexity": "simple"}'
)


def test_strip_code_fences() -> None:
    assert strip_code_fences("```json\n{\"a\": 1}\n```") == '{"a": 1}'
    assert strip_code_fences("```\nplain\n```") == "plain"
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'


@pytest.mark.parametrize("reply", [ANALYSIS_JSON, f"```json\n{ANALYSIS_JSON}\n```"])
def test_analyze_code_parses_reply(reply: str) -> None:
    completer = _ScriptedCompleter(reply)
    assistant = CodeAssistant(completer)

    analysis = assistant.analyze_code("function debounce(){}", "javascript")

    assert analysis.tags == ["timing", "utility"]
    assert analysis.description == "Delays calls"
    assert analysis.framework is None
    assert analysis.complexity == "simple"
    call = completer.calls[0]
    assert "javascript" in call["prompt"]
    assert "function debounce(){}" in call["prompt"]
    assert call["json_schema"] is not None


@pytest.mark.parametrize("reply", ["", "not json", '{"tags": []}', '{"description": "x", "complexity": "huge"}'])
def test_analyze_code_rejects_unreadable_reply(reply: str) -> None:
    assistant = CodeAssistant(_ScriptedCompleter(reply))

    with pytest.raises(ProviderError):
        assistant.analyze_code("x = 1", "python")


def test_analyze_code_validates_input_before_calling_provider() -> None:
    completer = _ScriptedCompleter(ANALYSIS_JSON)
    assistant = CodeAssistant(completer)

    with pytest.raises(ValidationError, match="too long"):
        assistant.analyze_code("x" * (MAX_ANALYZE_CHARS + 1), "python")
    with pytest.raises(ValidationError):
        assistant.analyze_code("", "python")
    with pytest.raises(ValidationError):
        assistant.analyze_code("x = 1", "")

    assert completer.calls == []


def test_explain_code_returns_reply() -> None:
    completer = _ScriptedCompleter("It delays calls until input settles.")
    assistant = CodeAssistant(completer)

    assert assistant.explain_code("debounce()", "javascript") == "It delays calls until input settles."
    assert completer.calls[0]["json_schema"] is None


def test_explain_code_falls_back_on_empty_reply() -> None:
    assistant = CodeAssistant(_ScriptedCompleter(""))

    assert assistant.explain_code("x = 1", "python") == FALLBACK_EXPLANATION


def test_completion_provider_builds_request_config() -> None:
    models = FakeGenerateModels(reply="  {\"ok\": true}\n")
    provider = GenAICompletionProvider(client=FakeGenAIClient(models=models), model="test-model")

    reply = provider.complete(
        "prompt text",
        system="be brief",
        json_schema={"type": "object"},
        temperature=0.1,
        max_output_tokens=50,
    )

    assert reply == '{"ok": true}'
    call = models.calls[0]
    assert call["model"] == "test-model"
    assert call["contents"] == "prompt text"
    assert call["config"] == {
        "temperature": 0.1,
        "max_output_tokens": 50,
        "system_instruction": "be brief",
        "response_mime_type": "application/json",
        "response_json_schema": {"type": "object"},
    }


def test_completion_provider_handles_missing_text() -> None:
    models = FakeGenerateModels(reply=None)
    provider = GenAICompletionProvider(client=FakeGenAIClient(models=models))

    assert provider.complete("prompt") == ""
    assert "system_instruction" not in models.calls[0]["config"]


def test_completion_provider_translates_timeouts() -> None:
    models = FakeGenerateModels(error=httpx.ReadTimeout("slow"))
    provider = GenAICompletionProvider(client=FakeGenAIClient(models=models))

    with pytest.raises(ProviderTimeoutError):
        provider.complete("prompt")


def test_completion_config_is_accepted_by_genai_types() -> None:
    models = FakeGenerateModels(reply="{}")
    provider = GenAICompletionProvider(client=FakeGenAIClient(models=models))

    provider.complete("prompt", system="sys", json_schema=CodeAnalysis.model_json_schema())

    config = types.GenerateContentConfig.model_validate(models.calls[0]["config"])
    assert config.response_mime_type == "application/json"
    assert config.response_json_schema == CodeAnalysis.model_json_schema()
