"""
Embedding provider for vector-based semantic search.

Wraps the Google GenAI embedding API for snippet and query embedding
with configurable model and dimensions.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Protocol

from .config import (
    DEFAULT_EMBEDDING_DIM,
    DEFAULT_EMBEDDING_MODEL,
    ENV_EMBEDDING_DIM,
    ENV_EMBEDDING_MODEL,
)
from .errors import ProviderError
from .provider import build_genai_client, translate_provider_errors

logger = logging.getLogger(__name__)


class Embedder(Protocol):
    """Anything that turns text into a fixed-length vector."""

    def embed_text(self, text: str) -> list[float]:
        """Embed stored snippet text."""

    def embed_query(self, query: str) -> list[float]:
        """Embed a search query."""


class EmbeddingProvider:
    """Generate text embeddings via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        dim: int | None = None,
        timeout: float | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = model or os.getenv(ENV_EMBEDDING_MODEL, DEFAULT_EMBEDDING_MODEL)
        self.dim = dim or int(os.getenv(ENV_EMBEDDING_DIM, str(DEFAULT_EMBEDDING_DIM)))

        if client is not None:
            self._client = client
        else:
            self._client = build_genai_client(api_key=api_key, timeout=timeout)

    def embed_text(self, text: str) -> list[float]:
        """Embed snippet text for storage."""
        return self._embed(text, task_type="RETRIEVAL_DOCUMENT")

    def embed_query(self, query: str) -> list[float]:
        """Embed a single query text for retrieval."""
        return self._embed(query, task_type="RETRIEVAL_QUERY")

    def _embed(self, text: str, *, task_type: str) -> list[float]:
        with translate_provider_errors("embedding"):
            result = self._client.models.embed_content(
                model=self.model,
                contents=[text],
                config={
                    "task_type": task_type,
                    "output_dimensionality": self.dim,
                },
            )

        embeddings = getattr(result, "embeddings", None)
        if not embeddings or not getattr(embeddings[0], "values", None):
            logger.warning("Provider returned no embedding values for model %s", self.model)
            raise ProviderError("Provider returned an empty embedding")
        return [float(value) for value in embeddings[0].values]


class UnconfiguredEmbedder:
    """Stand-in used when no provider credentials are available.

    Keyword search and plain reads keep working; anything that needs a vector
    fails the same way a provider outage would.
    """

    def embed_text(self, text: str) -> list[float]:  # noqa: ARG002
        raise ProviderError("Embedding provider is not configured")

    def embed_query(self, query: str) -> list[float]:  # noqa: ARG002
        raise ProviderError("Embedding provider is not configured")
