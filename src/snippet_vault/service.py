"""
Snippet CRUD with embedding maintenance and search.

Writes follow validate -> (maybe embed) -> one store call. If an embedding is
required and the provider fails, the write is aborted and nothing is stored,
so content changes never land next to a stale embedding.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .embeddings import Embedder
from .errors import NotFoundError, ValidationError
from .maintenance import embedding_for_update, maybe_embed
from .models import SnippetCreate
from .search import SearchOrchestrator, serialize_embedding
from .storage import SnippetRecord, SnippetStore, new_snippet_id

logger = logging.getLogger(__name__)

LIST_PAGE_LIMIT = 100

# Columns that may be omitted from an update but never set to null.
_NON_NULLABLE_FIELDS: frozenset[str] = frozenset(
    {"title", "code", "language", "tags", "is_public", "is_favorite"}
)


class SnippetService:
    """User-scoped snippet operations over a store and an embedder."""

    def __init__(self, store: SnippetStore, embedder: Embedder) -> None:
        self.store = store
        self.embedder = embedder
        self.search_engine = SearchOrchestrator(store, embedder)

    def create(self, user_id: str, payload: SnippetCreate) -> SnippetRecord:
        vector = maybe_embed(
            self.embedder,
            title=payload.title,
            description=payload.description,
            code=payload.code,
        )
        record = SnippetRecord(
            id=new_snippet_id(),
            user_id=user_id,
            title=payload.title,
            description=payload.description,
            code=payload.code,
            language=payload.language,
            tags=list(payload.tags),
            embedding=serialize_embedding(vector) if vector is not None else None,
            framework=payload.framework,
            complexity=payload.complexity,
            is_public=payload.is_public,
            is_favorite=payload.is_favorite,
        )
        created = self.store.create_snippet(record)
        logger.info("Created snippet %s for user %s", created.id, user_id)
        return created

    def get(self, user_id: str, snippet_id: str) -> SnippetRecord:
        snippet = self.store.get_snippet(snippet_id=snippet_id, user_id=user_id)
        if snippet is None:
            raise NotFoundError()
        return snippet

    def list_snippets(
        self,
        user_id: str,
        *,
        limit: int = LIST_PAGE_LIMIT,
        offset: int = 0,
    ) -> list[SnippetRecord]:
        bounded_limit = min(max(limit, 1), LIST_PAGE_LIMIT)
        return self.store.list_snippets(
            user_id=user_id,
            limit=bounded_limit,
            offset=max(offset, 0),
        )

    def update(
        self,
        user_id: str,
        snippet_id: str,
        changes: Mapping[str, Any],
    ) -> SnippetRecord:
        null_fields = sorted(
            name for name in _NON_NULLABLE_FIELDS if name in changes and changes[name] is None
        )
        if null_fields:
            raise ValidationError(f"Fields cannot be null: {', '.join(null_fields)}")

        existing = self.get(user_id, snippet_id)
        pending = dict(changes)
        # Always written so the embedding and content land in the same statement.
        pending["embedding"] = embedding_for_update(self.embedder, existing, changes)

        updated = self.store.update_snippet(
            snippet_id=snippet_id,
            user_id=user_id,
            changes=pending,
        )
        if updated is None:
            # Deleted between the ownership check and the write.
            raise NotFoundError()
        return updated

    def delete(self, user_id: str, snippet_id: str) -> None:
        if not self.store.delete_snippet(snippet_id=snippet_id, user_id=user_id):
            raise NotFoundError()
        logger.info("Deleted snippet %s for user %s", snippet_id, user_id)

    def record_usage(self, user_id: str, snippet_id: str) -> SnippetRecord:
        snippet = self.store.record_usage(snippet_id=snippet_id, user_id=user_id)
        if snippet is None:
            raise NotFoundError()
        return snippet

    def search(self, user_id: str, query: str, *, semantic: bool = False) -> list[SnippetRecord]:
        return self.search_engine.search(
            user_id=user_id,
            query=query,
            mode="semantic" if semantic else "keyword",
        )
