from pathlib import Path
from typing import Annotated, Optional

from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer import Exit, Option, Typer

from .config import configure_logging, has_api_key, resolve_db_path
from .embeddings import Embedder, EmbeddingProvider, UnconfiguredEmbedder
from .errors import SnippetVaultError
from .models import SnippetCreate
from .service import SnippetService
from .storage import DuckDBSnippetStore, SnippetRecord

app = Typer(help="Store, tag, and search code snippets.")
console = Console()


def build_embedder() -> Embedder:
    if not has_api_key():
        return UnconfiguredEmbedder()
    return EmbeddingProvider()


def open_service(db_path: str | None) -> tuple[SnippetService, DuckDBSnippetStore]:
    store = DuckDBSnippetStore(resolve_db_path(db_path))
    return SnippetService(store, build_embedder()), store


def render_snippets(records: list[SnippetRecord], *, title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Language", style="magenta")
    table.add_column("Tags")
    table.add_column("Created", style="dim")
    for index, record in enumerate(records, start=1):
        created = record.created_at.strftime("%Y-%m-%d %H:%M") if record.created_at else ""
        table.add_row(
            str(index),
            record.id,
            escape(record.title),
            record.language,
            escape(", ".join(record.tags)),
            created,
        )
    return table


@app.callback()
def main(
    log_level: Annotated[
        Optional[str],
        Option("--log-level", help="Logging level (defaults to SNIPPET_VAULT_LOG_LEVEL or INFO)."),
    ] = None,
) -> None:
    configure_logging(log_level)


@app.command()
def serve(
    host: Annotated[str, Option("--host", help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, Option("--port", "-p", help="Port to listen on.")] = 8000,
) -> None:
    """Run the HTTP API."""
    from .server import run_server

    run_server(host=host, port=port)


@app.command()
def add(
    user: Annotated[str, Option("--user", "-u", help="Owner user id.")],
    title: Annotated[str, Option("--title", "-t", help="Snippet title.")],
    language: Annotated[str, Option("--language", "-l", help="Programming language.")],
    code_file: Annotated[
        Path,
        Option("--code-file", "-f", exists=True, dir_okay=False, help="File holding the code."),
    ],
    description: Annotated[
        Optional[str], Option("--description", "-d", help="Optional description.")
    ] = None,
    tags: Annotated[
        Optional[list[str]], Option("--tag", help="Tag to attach; repeat for several.")
    ] = None,
    db_path: Annotated[
        Optional[str], Option("--db-path", help="DuckDB file (overrides SNIPPET_VAULT_DB_PATH).")
    ] = None,
) -> None:
    """Add a snippet from a file."""
    try:
        payload = SnippetCreate(
            title=title,
            description=description,
            code=code_file.read_text(),
            language=language,
            tags=tags or [],
        )
    except PydanticValidationError as exc:
        console.print(f"[bold red]Invalid snippet:[/] {escape(str(exc))}")
        raise Exit(code=1)

    service, store = open_service(db_path)
    try:
        record = service.create(user, payload)
    except SnippetVaultError as exc:
        console.print(f"[bold red]Could not add snippet:[/] {escape(str(exc))}")
        raise Exit(code=1)
    finally:
        store.close()

    embedded = "with embedding" if record.has_embedding else "without embedding"
    console.print(f"[bold green]Added[/] {record.id} ({embedded})")


@app.command()
def search(
    user: Annotated[str, Option("--user", "-u", help="Owner user id.")],
    query: Annotated[str, Option("--query", "-q", help="Search text.")],
    semantic: Annotated[
        bool, Option("--semantic/--keyword", help="Use embedding similarity instead of substring match.")
    ] = False,
    db_path: Annotated[
        Optional[str], Option("--db-path", help="DuckDB file (overrides SNIPPET_VAULT_DB_PATH).")
    ] = None,
) -> None:
    """Search a user's snippets."""
    service, store = open_service(db_path)
    try:
        records = service.search(user, query, semantic=semantic)
    except SnippetVaultError as exc:
        console.print(f"[bold red]Search failed:[/] {escape(str(exc))}")
        raise Exit(code=1)
    finally:
        store.close()

    if not records:
        console.print("[yellow]No matching snippets.[/]")
        return
    mode = "semantic" if semantic else "keyword"
    console.print(render_snippets(records, title=f"{len(records)} {mode} results for {query!r}"))
