"""
FastAPI server for the snippet vault.

Caller identity comes from the surrounding auth layer as the ``X-User-Id``
header. Store and provider work is blocking and runs in worker threads.
"""

import asyncio
import logging
import threading
from datetime import datetime, timezone
from typing import Annotated, Iterator

import duckdb
from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .assistant import CodeAssistant, GenAICompletionProvider
from .config import configure_logging, has_api_key, resolve_db_path
from .embeddings import Embedder, EmbeddingProvider, UnconfiguredEmbedder
from .errors import (
    NotFoundError,
    ProviderError,
    ProviderTimeoutError,
    ValidationError,
)
from .models import (
    CodeAnalysis,
    CodeRequest,
    EmbedRequest,
    SnippetCreate,
    SnippetOut,
    SnippetUpdate,
)
from .service import LIST_PAGE_LIMIT, SnippetService
from .storage import DuckDBSnippetStore, SnippetStore

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"

app = FastAPI(title="SnippetVault", description="Store, tag, and search code snippets")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def get_db_path() -> str:
    return resolve_db_path()


_schema_lock = threading.Lock()
_initialized_db_paths: set[str] = set()


def ensure_schema(db_path: str) -> None:
    """Create the snippet schema once per database file in this process.

    Request stores open with ``initialize=False`` so concurrent requests on a
    fresh file never race on DDL.
    """
    with _schema_lock:
        if db_path in _initialized_db_paths:
            return
        DuckDBSnippetStore(db_path).close()
        _initialized_db_paths.add(db_path)


def get_store(db_path: Annotated[str, Depends(get_db_path)]) -> Iterator[SnippetStore]:
    """Open one store connection per request."""
    ensure_schema(db_path)
    store = DuckDBSnippetStore(db_path, initialize=False)
    try:
        yield store
    finally:
        store.close()


def get_embedder() -> Embedder:
    if not has_api_key():
        return UnconfiguredEmbedder()
    return EmbeddingProvider()


def get_assistant() -> CodeAssistant:
    if not has_api_key():
        raise ProviderError("Completion provider is not configured")
    return CodeAssistant(GenAICompletionProvider())


def get_user_id(
    x_user_id: Annotated[str | None, Header(alias=USER_ID_HEADER)] = None,
) -> str:
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_user_id.strip()


def get_service(
    store: Annotated[SnippetStore, Depends(get_store)],
    embedder: Annotated[Embedder, Depends(get_embedder)],
) -> SnippetService:
    return SnippetService(store, embedder)


UserId = Annotated[str, Depends(get_user_id)]
Service = Annotated[SnippetService, Depends(get_service)]


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError):
    return JSONResponse({"error": str(exc)}, status_code=400)


@app.exception_handler(NotFoundError)
async def handle_not_found(request: Request, exc: NotFoundError):
    return JSONResponse({"error": "Snippet not found"}, status_code=404)


@app.exception_handler(ProviderError)
async def handle_provider_error(request: Request, exc: ProviderError):
    if isinstance(exc, ProviderTimeoutError):
        return JSONResponse({"error": "AI provider timed out"}, status_code=504)
    logger.warning("Provider failure on %s: %s", request.url.path, exc)
    return JSONResponse({"error": "AI provider request failed"}, status_code=502)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    details = [
        {
            "path": ".".join(str(part) for part in err.get("loc", ())[1:]),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse({"error": "Validation error", "details": details}, status_code=400)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@app.get("/health/live")
async def health_live():
    """Liveness probe."""
    return {"status": "ok", "timestamp": _timestamp()}


@app.get("/health/ready")
async def health_ready(db_path: Annotated[str, Depends(get_db_path)]):
    """Readiness probe: database reachable, provider configured."""
    checks: dict[str, dict[str, str]] = {}
    is_ready = True

    try:
        await asyncio.to_thread(ensure_schema, db_path)
        store = await asyncio.to_thread(DuckDBSnippetStore, db_path, initialize=False)
        try:
            ok = await asyncio.to_thread(store.ping)
        finally:
            store.close()
        checks["database"] = {"status": "ok" if ok else "error"}
        is_ready = ok
    except duckdb.Error as exc:
        logger.error("Database health check failed: %s", exc)
        checks["database"] = {"status": "error", "error": "Database unavailable"}
        is_ready = False

    if has_api_key():
        checks["provider"] = {"status": "ok"}
    else:
        checks["provider"] = {"status": "warning", "error": "GOOGLE_API_KEY not configured"}

    return JSONResponse(
        {
            "status": "ready" if is_ready else "not_ready",
            "timestamp": _timestamp(),
            "checks": checks,
        },
        status_code=200 if is_ready else 503,
    )


# ---------------------------------------------------------------------------
# Snippets
# ---------------------------------------------------------------------------


@app.get("/api/snippets", response_model=list[SnippetOut])
async def list_snippets(
    user_id: UserId,
    service: Service,
    limit: int = LIST_PAGE_LIMIT,
    offset: int = 0,
):
    """List the caller's snippets, newest first."""
    records = await asyncio.to_thread(
        service.list_snippets, user_id, limit=limit, offset=offset
    )
    return [SnippetOut.from_record(record) for record in records]


@app.post("/api/snippets", response_model=SnippetOut, status_code=201)
async def create_snippet(payload: SnippetCreate, user_id: UserId, service: Service):
    """Create a snippet, embedding its content when it has code."""
    record = await asyncio.to_thread(service.create, user_id, payload)
    return SnippetOut.from_record(record)


@app.get("/api/snippets/search", response_model=list[SnippetOut])
async def search_snippets(
    user_id: UserId,
    service: Service,
    q: str | None = None,
    semantic: bool = False,
):
    """Keyword search by default; semantic search when ``semantic=true``."""
    records = await asyncio.to_thread(
        service.search, user_id, q or "", semantic=semantic
    )
    return [SnippetOut.from_record(record) for record in records]


@app.get("/api/snippets/{snippet_id}", response_model=SnippetOut)
async def get_snippet(snippet_id: str, user_id: UserId, service: Service):
    record = await asyncio.to_thread(service.get, user_id, snippet_id)
    return SnippetOut.from_record(record)


@app.put("/api/snippets/{snippet_id}", response_model=SnippetOut)
async def update_snippet(
    snippet_id: str,
    payload: SnippetUpdate,
    user_id: UserId,
    service: Service,
):
    """Apply a partial update; the embedding is refreshed when content changes."""
    record = await asyncio.to_thread(
        service.update, user_id, snippet_id, payload.to_changes()
    )
    return SnippetOut.from_record(record)


@app.delete("/api/snippets/{snippet_id}")
async def delete_snippet(snippet_id: str, user_id: UserId, service: Service):
    await asyncio.to_thread(service.delete, user_id, snippet_id)
    return {"message": "Snippet deleted successfully"}


@app.post("/api/snippets/{snippet_id}/use", response_model=SnippetOut)
async def use_snippet(snippet_id: str, user_id: UserId, service: Service):
    """Record that the caller copied or used a snippet."""
    record = await asyncio.to_thread(service.record_usage, user_id, snippet_id)
    return SnippetOut.from_record(record)


# ---------------------------------------------------------------------------
# AI helpers
# ---------------------------------------------------------------------------


@app.post("/api/ai/analyze", response_model=CodeAnalysis)
async def analyze_code(
    request: CodeRequest,
    user_id: UserId,  # noqa: ARG001
    assistant: Annotated[CodeAssistant, Depends(get_assistant)],
):
    """Suggest tags, a description, framework and complexity for code."""
    return await asyncio.to_thread(assistant.analyze_code, request.code, request.language)


@app.post("/api/ai/explain")
async def explain_code(
    request: CodeRequest,
    user_id: UserId,  # noqa: ARG001
    assistant: Annotated[CodeAssistant, Depends(get_assistant)],
):
    explanation = await asyncio.to_thread(
        assistant.explain_code, request.code, request.language
    )
    return {"explanation": explanation}


@app.post("/api/ai/embed")
async def embed_text(
    request: EmbedRequest,
    user_id: UserId,  # noqa: ARG001
    embedder: Annotated[Embedder, Depends(get_embedder)],
):
    embedding = await asyncio.to_thread(embedder.embed_text, request.text)
    return {"embedding": embedding}


def run_server(host: str = "127.0.0.1", port: int = 8000):
    """Run the FastAPI server."""
    import uvicorn

    configure_logging()
    ensure_schema(resolve_db_path())
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
