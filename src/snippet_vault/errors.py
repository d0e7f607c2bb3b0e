"""
Error types shared by the store, search, and provider layers.
"""

from __future__ import annotations


class SnippetVaultError(Exception):
    """Base class for all snippet vault errors."""


class ValidationError(SnippetVaultError, ValueError):
    """Raised when caller input is missing or malformed."""


class NotFoundError(SnippetVaultError):
    """Raised when a snippet does not exist or belongs to another user."""

    def __init__(self, message: str = "Snippet not found") -> None:
        super().__init__(message)


class ProviderError(SnippetVaultError):
    """Raised when the embedding/completion provider fails or misbehaves."""


class ProviderTimeoutError(ProviderError):
    """Raised when a provider call exceeds its configured timeout."""


class MalformedDataError(SnippetVaultError):
    """Raised when a stored value (e.g. an embedding) cannot be decoded."""


class InvalidVectorError(SnippetVaultError, ValueError):
    """Raised when vectors cannot be compared (empty, mismatched, zero, non-finite)."""
