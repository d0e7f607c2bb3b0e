"""
Configuration helpers for storage, provider, and logging settings.

Every setting is read from the environment with a module-level default.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path


DEFAULT_DB_PATH = "~/.snippet_vault/snippets.duckdb"
ENV_DB_PATH = "SNIPPET_VAULT_DB_PATH"

ENV_API_KEY = "GOOGLE_API_KEY"

DEFAULT_EMBEDDING_MODEL = "gemini-embedding-001"
ENV_EMBEDDING_MODEL = "SNIPPET_VAULT_EMBEDDING_MODEL"
DEFAULT_EMBEDDING_DIM = 768
ENV_EMBEDDING_DIM = "SNIPPET_VAULT_EMBEDDING_DIM"

DEFAULT_COMPLETION_MODEL = "gemini-2.5-flash"
ENV_COMPLETION_MODEL = "SNIPPET_VAULT_COMPLETION_MODEL"

DEFAULT_PROVIDER_TIMEOUT = 10.0
ENV_PROVIDER_TIMEOUT = "SNIPPET_VAULT_PROVIDER_TIMEOUT"

DEFAULT_LOG_LEVEL = "INFO"
ENV_LOG_LEVEL = "SNIPPET_VAULT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_db_path(override_path: str | None = None) -> str:
    """
    Resolve the DuckDB path from CLI override, env var, or default.

    Precedence:
    1) explicit override_path
    2) SNIPPET_VAULT_DB_PATH
    3) default path
    """
    raw_path = override_path or os.getenv(ENV_DB_PATH) or DEFAULT_DB_PATH
    resolved = Path(raw_path).expanduser().resolve()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return str(resolved)


def resolve_api_key(override_key: str | None = None) -> str:
    api_key = override_key or os.getenv(ENV_API_KEY)
    if not api_key:
        raise ValueError(
            f"{ENV_API_KEY} not found. Provide api_key or set the environment variable."
        )
    return api_key


def has_api_key() -> bool:
    return bool(os.getenv(ENV_API_KEY))


def resolve_provider_timeout(override_seconds: float | None = None) -> float:
    """Return the provider timeout in seconds; must be positive."""
    if override_seconds is not None:
        timeout = float(override_seconds)
    else:
        timeout = float(os.getenv(ENV_PROVIDER_TIMEOUT, str(DEFAULT_PROVIDER_TIMEOUT)))
    if timeout <= 0:
        raise ValueError(f"Provider timeout must be positive, got {timeout!r}.")
    return timeout


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for CLI and server entry points."""
    resolved = (level or os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger().setLevel(resolved)
