"""
Embedding maintenance for snippet writes.

A snippet's embedding is derived from ``title``, ``description`` and ``code``.
It is computed on create when there is code, recomputed on update whenever any
of those three fields is part of the update, and carried forward otherwise.
Provider failures propagate so the surrounding write is aborted.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .embeddings import Embedder
from .search.similarity import serialize_embedding
from .storage import SnippetRecord

logger = logging.getLogger(__name__)

EMBEDDING_SOURCE_FIELDS: tuple[str, ...] = ("title", "description", "code")


def build_embedding_text(title: str, description: str | None, code: str) -> str:
    return f"{title} {description or ''} {code}"


def maybe_embed(
    embedder: Embedder,
    *,
    title: str,
    description: str | None,
    code: str | None,
) -> list[float] | None:
    """Return an embedding for the snippet content, or None when there is no code."""
    if not code:
        return None
    return embedder.embed_text(build_embedding_text(title, description, code))


def touches_embedding_source(changes: Mapping[str, Any]) -> bool:
    return any(name in changes for name in EMBEDDING_SOURCE_FIELDS)


def embedding_for_update(
    embedder: Embedder,
    existing: SnippetRecord,
    changes: Mapping[str, Any],
) -> str | None:
    """Return the serialized embedding the updated snippet should carry.

    Untouched source fields keep their stored values; touched ones use the
    new value even when it is empty.
    """
    if not touches_embedding_source(changes):
        return existing.embedding

    title = changes["title"] if "title" in changes else existing.title
    description = changes["description"] if "description" in changes else existing.description
    code = changes["code"] if "code" in changes else existing.code

    vector = maybe_embed(embedder, title=title, description=description, code=code)
    if vector is None:
        logger.debug("Snippet %s has no code after update; clearing embedding", existing.id)
        return None
    return serialize_embedding(vector)
