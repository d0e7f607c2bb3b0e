"""
Storage interfaces and data models for snippet persistence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol


# Columns a caller may change through update_snippet.
UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "description",
        "code",
        "language",
        "tags",
        "embedding",
        "framework",
        "complexity",
        "is_public",
        "is_favorite",
    }
)


@dataclass(frozen=True)
class SnippetRecord:
    """A stored code snippet owned by exactly one user."""

    id: str
    user_id: str
    title: str
    code: str
    language: str
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    embedding: str | None = None
    framework: str | None = None
    complexity: str | None = None
    is_public: bool = False
    is_favorite: bool = False
    usage_count: int = 0
    last_used_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)


class SnippetStore(Protocol):
    """Protocol for snippet persistence used by the service and search layers."""

    def initialize(self) -> None:
        """Initialize required tables/indexes."""

    def close(self) -> None:
        """Release the underlying connection."""

    def ping(self) -> bool:
        """Return True when the backing database answers a trivial query."""

    def create_snippet(self, record: SnippetRecord) -> SnippetRecord:
        """Insert a snippet and return it as stored."""

    def get_snippet(self, *, snippet_id: str, user_id: str) -> SnippetRecord | None:
        """Get a snippet by id, only if owned by *user_id*."""

    def list_snippets(
        self,
        *,
        user_id: str,
        limit: int = 100,
        offset: int = 0,
    ) -> list[SnippetRecord]:
        """List a user's snippets, newest first."""

    def find_recent_by_owner(self, *, user_id: str, limit: int) -> list[SnippetRecord]:
        """Return up to *limit* of the user's most recent snippets, newest first."""

    def search_by_owner(
        self,
        *,
        user_id: str,
        query: str,
        limit: int,
    ) -> list[SnippetRecord]:
        """Case-insensitive substring search over title/description/code/language."""

    def update_snippet(
        self,
        *,
        snippet_id: str,
        user_id: str,
        changes: dict[str, Any],
    ) -> SnippetRecord | None:
        """Apply a partial update in a single statement; None if not found."""

    def delete_snippet(self, *, snippet_id: str, user_id: str) -> bool:
        """Delete a snippet; return True if a row was removed."""

    def record_usage(self, *, snippet_id: str, user_id: str) -> SnippetRecord | None:
        """Increment usage_count and stamp last_used_at."""
