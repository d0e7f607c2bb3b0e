"""Tests for the command-line interface."""

from __future__ import annotations

from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

import snippet_vault.main as main_module
from snippet_vault.main import app

from .conftest import ABOVE_VECTOR, QUERY_VECTOR, FailingEmbedder, KeyedEmbedder

runner = CliRunner()


@pytest.fixture()
def cli_env(tmp_path: Path, monkeypatch) -> dict[str, str]:
    embedder = KeyedEmbedder({"rate limiting": QUERY_VECTOR, "debounce": ABOVE_VECTOR})
    monkeypatch.setattr(main_module, "build_embedder", lambda: embedder)
    monkeypatch.setattr(main_module, "console", Console(width=200))
    code_file = tmp_path / "debounce.js"
    code_file.write_text("function debounce(fn, ms){...}")
    return {"db": str(tmp_path / "cli.duckdb"), "code": str(code_file)}


def _add(cli_env: dict[str, str], *extra: str):
    return runner.invoke(
        app,
        [
            "add",
            "--user", "user-a",
            "--title", "Debounce",
            "--language", "javascript",
            "--code-file", cli_env["code"],
            "--db-path", cli_env["db"],
            *extra,
        ],
    )


def test_add_then_keyword_search(cli_env) -> None:
    added = _add(cli_env, "--tag", "timing", "--tag", "utils")

    assert added.exit_code == 0, added.output
    assert "Added" in added.output
    assert "with embedding" in added.output

    result = runner.invoke(
        app,
        ["search", "--user", "user-a", "--query", "debounce", "--db-path", cli_env["db"]],
    )

    assert result.exit_code == 0, result.output
    assert "1 keyword results for 'debounce'" in result.output
    assert "Debounce" in result.output
    assert "timing, utils" in result.output


def test_semantic_search_command(cli_env) -> None:
    _add(cli_env)

    result = runner.invoke(
        app,
        [
            "search",
            "--user", "user-a",
            "--query", "rate limiting function",
            "--semantic",
            "--db-path", cli_env["db"],
        ],
    )

    assert result.exit_code == 0, result.output
    assert "1 semantic results" in result.output


def test_search_is_owner_scoped(cli_env) -> None:
    _add(cli_env)

    result = runner.invoke(
        app,
        ["search", "--user", "user-b", "--query", "debounce", "--db-path", cli_env["db"]],
    )

    assert result.exit_code == 0
    assert "No matching snippets." in result.output


def test_search_rejects_empty_query(cli_env) -> None:
    result = runner.invoke(
        app,
        ["search", "--user", "user-a", "--query", "", "--db-path", cli_env["db"]],
    )

    assert result.exit_code == 1
    assert "Search failed" in result.output


def test_add_reports_provider_failure(cli_env, monkeypatch) -> None:
    monkeypatch.setattr(main_module, "build_embedder", lambda: FailingEmbedder())

    result = _add(cli_env)

    assert result.exit_code == 1
    assert "Could not add snippet" in result.output


def test_add_rejects_invalid_tag(cli_env) -> None:
    result = _add(cli_env, "--tag", "has space")

    assert result.exit_code == 1
    assert "Invalid snippet" in result.output
