from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from snippet_vault.errors import ProviderError
from snippet_vault.search import serialize_embedding
from snippet_vault.storage import DuckDBSnippetStore, SnippetRecord, new_snippet_id


# 4-d vectors with exact cosine values against QUERY_VECTOR (norm 2):
#   ABOVE  -> 8 / (2 * sqrt(26)) ~= 0.784
#   AT     -> 7 / (2 * 5)        == 0.7
#   BELOW  -> 5 / (2 * 5)        == 0.5
QUERY_VECTOR = [1.0, 1.0, 1.0, 1.0]
ABOVE_VECTOR = [4.0, 3.0, 1.0, 0.0]
AT_THRESHOLD_VECTOR = [4.0, 3.0, 0.0, 0.0]
BELOW_VECTOR = [5.0, 0.0, 0.0, 0.0]
FAR_VECTOR = [1.0, -1.0, 1.0, -1.0]

BASE_TIME = datetime(2025, 1, 1, 12, 0, 0)


class KeyedEmbedder:
    """Stub embedder returning a controlled vector per input string.

    A text gets the vector of the first key it contains, else ``default``.
    """

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        *,
        default: list[float] | None = None,
    ) -> None:
        self.vectors = vectors or {}
        self.default = default if default is not None else list(FAR_VECTOR)
        self.text_calls: list[str] = []
        self.query_calls: list[str] = []

    def _lookup(self, text: str) -> list[float]:
        for key, vector in self.vectors.items():
            if key in text:
                return list(vector)
        return list(self.default)

    def embed_text(self, text: str) -> list[float]:
        self.text_calls.append(text)
        return self._lookup(text)

    def embed_query(self, query: str) -> list[float]:
        self.query_calls.append(query)
        return self._lookup(query)


class FailingEmbedder:
    """Embedder whose every call fails with the given error."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or ProviderError("provider down")
        self.calls = 0

    def embed_text(self, text: str) -> list[float]:  # noqa: ARG002
        self.calls += 1
        raise self.error

    def embed_query(self, query: str) -> list[float]:  # noqa: ARG002
        self.calls += 1
        raise self.error


# ---------------------------------------------------------------------------
# Fake GenAI client pieces
# ---------------------------------------------------------------------------


@dataclass
class FakeEmbedding:
    values: list[float]


@dataclass
class FakeEmbedResult:
    embeddings: list[FakeEmbedding]


class FakeEmbedModels:
    """Records calls and returns deterministic embeddings."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.error = error

    def embed_content(self, *, model: str, contents: list[str], config: dict) -> FakeEmbedResult:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        dim = config.get("output_dimensionality", 768)
        return FakeEmbedResult(
            embeddings=[FakeEmbedding(values=[float(i + 1)] * dim) for i in range(len(contents))]
        )


@dataclass
class FakeGenerateResponse:
    text: str | None


class FakeGenerateModels:
    def __init__(self, reply: str | None = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def generate_content(self, *, model: str, contents: Any, config: dict) -> FakeGenerateResponse:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return FakeGenerateResponse(text=self.reply)


@dataclass
class FakeGenAIClient:
    models: Any = field(default_factory=FakeEmbedModels)


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_record(
    *,
    user_id: str = "user-a",
    title: str = "Snippet",
    code: str = "print('hi')",
    language: str = "python",
    description: str | None = None,
    embedding: list[float] | str | None = None,
    minutes: int = 0,
    **extra: Any,
) -> SnippetRecord:
    """Build a record; *minutes* offsets created_at from BASE_TIME."""
    if isinstance(embedding, list):
        embedding = serialize_embedding(embedding)
    created_at = BASE_TIME + timedelta(minutes=minutes)
    snippet_id = extra.pop("id", None) or new_snippet_id()
    return SnippetRecord(
        id=snippet_id,
        user_id=user_id,
        title=title,
        code=code,
        language=language,
        description=description,
        embedding=embedding,
        created_at=created_at,
        updated_at=created_at,
        **extra,
    )


@pytest.fixture()
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "snippets.duckdb")


@pytest.fixture()
def store(db_path: str):
    snippet_store = DuckDBSnippetStore(db_path)
    yield snippet_store
    snippet_store.close()
