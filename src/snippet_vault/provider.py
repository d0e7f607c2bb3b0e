"""
Shared Google GenAI client construction and error translation.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import httpx
from google.genai import Client as GenAIClient
from google.genai import errors as genai_errors
from google.genai.types import HttpOptions

from .config import resolve_api_key, resolve_provider_timeout
from .errors import ProviderError, ProviderTimeoutError

logger = logging.getLogger(__name__)


def build_genai_client(
    *,
    api_key: str | None = None,
    timeout: float | None = None,
) -> GenAIClient:
    """Create a GenAI client with a bounded per-request timeout."""
    resolved_key = resolve_api_key(api_key)
    timeout_ms = int(resolve_provider_timeout(timeout) * 1000)
    return GenAIClient(
        api_key=resolved_key,
        http_options=HttpOptions(timeout=timeout_ms),
    )


@contextmanager
def translate_provider_errors(operation: str) -> Iterator[None]:
    """Re-raise transport and API failures as ProviderError subclasses."""
    try:
        yield
    except httpx.TimeoutException as exc:
        logger.warning("Provider %s timed out: %s", operation, exc)
        raise ProviderTimeoutError(f"Provider {operation} timed out") from exc
    except genai_errors.APIError as exc:
        logger.warning("Provider %s failed with status %s: %s", operation, exc.code, exc)
        raise ProviderError(f"Provider {operation} failed") from exc
    except httpx.HTTPError as exc:
        logger.warning("Provider %s transport error: %s", operation, exc)
        raise ProviderError(f"Provider {operation} failed") from exc
