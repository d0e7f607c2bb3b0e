"""Storage backends for snippet persistence."""

from .base import UPDATABLE_FIELDS, SnippetRecord, SnippetStore
from .duckdb import DuckDBSnippetStore, new_snippet_id

__all__ = [
    "UPDATABLE_FIELDS",
    "SnippetRecord",
    "SnippetStore",
    "DuckDBSnippetStore",
    "new_snippet_id",
]
