"""
SnippetVault - store, tag, and search code snippets.

This package provides a per-user snippet store with keyword search and
embedding-based semantic search, using Google GenAI for embeddings and
code analysis and DuckDB for persistence.

Example usage:
    >>> from snippet_vault import DuckDBSnippetStore, EmbeddingProvider, SnippetService
    >>> service = SnippetService(DuckDBSnippetStore("snippets.duckdb"), EmbeddingProvider())
    >>> results = service.search("user-1", "debounce", semantic=True)
"""

from .assistant import CodeAssistant, GenAICompletionProvider
from .embeddings import Embedder, EmbeddingProvider, UnconfiguredEmbedder
from .errors import (
    InvalidVectorError,
    MalformedDataError,
    NotFoundError,
    ProviderError,
    ProviderTimeoutError,
    SnippetVaultError,
    ValidationError,
)
from .models import CodeAnalysis, SnippetCreate, SnippetOut, SnippetUpdate
from .search import SearchOrchestrator, cosine_similarity
from .service import SnippetService
from .storage import DuckDBSnippetStore, SnippetRecord, SnippetStore

__all__ = [
    # Services
    "SnippetService",
    "SearchOrchestrator",
    "CodeAssistant",
    "cosine_similarity",
    # Providers
    "Embedder",
    "EmbeddingProvider",
    "UnconfiguredEmbedder",
    "GenAICompletionProvider",
    # Storage
    "DuckDBSnippetStore",
    "SnippetRecord",
    "SnippetStore",
    # Models
    "CodeAnalysis",
    "SnippetCreate",
    "SnippetOut",
    "SnippetUpdate",
    # Errors
    "SnippetVaultError",
    "ValidationError",
    "NotFoundError",
    "ProviderError",
    "ProviderTimeoutError",
    "MalformedDataError",
    "InvalidVectorError",
]
