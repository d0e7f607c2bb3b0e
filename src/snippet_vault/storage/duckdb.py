"""
DuckDB storage backend for snippet persistence.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import duckdb

from .base import UPDATABLE_FIELDS, SnippetRecord


_COLUMNS = (
    "id",
    "user_id",
    "title",
    "description",
    "code",
    "language",
    "tags_json",
    "embedding",
    "framework",
    "complexity",
    "is_public",
    "is_favorite",
    "usage_count",
    "last_used_at",
    "created_at",
    "updated_at",
)
_SELECT_COLUMNS = ", ".join(_COLUMNS)


def _utcnow() -> datetime:
    # TIMESTAMP columns are naive; everything is stored in UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_snippet_id() -> str:
    return str(uuid.uuid4())


class DuckDBSnippetStore:
    """DuckDB-backed persistence for user-owned snippets."""

    def __init__(
        self,
        db_path: str,
        *,
        read_only: bool = False,
        initialize: bool = True,
    ) -> None:
        self.db_path = str(Path(db_path).expanduser().resolve())
        self.read_only = read_only
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = duckdb.connect(self.db_path, read_only=read_only)
        if initialize and not read_only:
            self.initialize()

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        self._conn.close()

    def initialize(self) -> None:
        self._conn.execute("CREATE SEQUENCE IF NOT EXISTS snippet_seq START 1;")
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS snippets (
                id VARCHAR PRIMARY KEY,
                user_id VARCHAR NOT NULL,
                title VARCHAR NOT NULL,
                description VARCHAR,
                code VARCHAR NOT NULL,
                language VARCHAR NOT NULL,
                tags_json VARCHAR NOT NULL DEFAULT '[]',
                embedding VARCHAR,
                framework VARCHAR,
                complexity VARCHAR,
                is_public BOOLEAN DEFAULT FALSE,
                is_favorite BOOLEAN DEFAULT FALSE,
                usage_count INTEGER DEFAULT 0,
                last_used_at TIMESTAMP,
                created_at TIMESTAMP NOT NULL,
                updated_at TIMESTAMP NOT NULL,
                seq BIGINT NOT NULL DEFAULT nextval('snippet_seq')
            );
            """
        )
        self._conn.execute(
            """
            CREATE INDEX IF NOT EXISTS snippets_user_id_created_at_idx
            ON snippets (user_id, created_at);
            """
        )

    def ping(self) -> bool:
        row = self._conn.execute("SELECT 1").fetchone()
        return row is not None and int(row[0]) == 1

    def create_snippet(self, record: SnippetRecord) -> SnippetRecord:
        now = _utcnow()
        created_at = record.created_at or now
        updated_at = record.updated_at or created_at
        row = self._conn.execute(
            f"""
            INSERT INTO snippets (
                id, user_id, title, description, code, language, tags_json,
                embedding, framework, complexity, is_public, is_favorite,
                usage_count, last_used_at, created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            RETURNING {_SELECT_COLUMNS}
            """,
            [
                record.id or new_snippet_id(),
                record.user_id,
                record.title,
                record.description,
                record.code,
                record.language,
                json.dumps(list(record.tags)),
                record.embedding,
                record.framework,
                record.complexity,
                record.is_public,
                record.is_favorite,
                record.usage_count,
                record.last_used_at,
                created_at,
                updated_at,
            ],
        ).fetchone()
        if row is None:
            raise RuntimeError(f"Failed to insert snippet {record.id!r}")
        return self._row_to_record(row)

    def get_snippet(self, *, snippet_id: str, user_id: str) -> SnippetRecord | None:
        row = self._conn.execute(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM snippets
            WHERE id = ? AND user_id = ?
            LIMIT 1
            """,
            [snippet_id, user_id],
        ).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def list_snippets(
        self,
        *,
        user_id: str,
        limit: int = 100,
        offset: int = 0,
    ) -> list[SnippetRecord]:
        rows = self._conn.execute(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM snippets
            WHERE user_id = ?
            ORDER BY created_at DESC, seq DESC
            LIMIT ? OFFSET ?
            """,
            [user_id, limit, offset],
        ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def find_recent_by_owner(self, *, user_id: str, limit: int) -> list[SnippetRecord]:
        return self.list_snippets(user_id=user_id, limit=limit, offset=0)

    def search_by_owner(
        self,
        *,
        user_id: str,
        query: str,
        limit: int,
    ) -> list[SnippetRecord]:
        # contains() is a literal match, so % and _ in the query need no escaping.
        needle = query.lower()
        rows = self._conn.execute(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM snippets
            WHERE user_id = ?
              AND (
                contains(lower(title), ?)
                OR contains(lower(coalesce(description, '')), ?)
                OR contains(lower(code), ?)
                OR contains(lower(language), ?)
              )
            ORDER BY created_at DESC, seq DESC
            LIMIT ?
            """,
            [user_id, needle, needle, needle, needle, limit],
        ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def update_snippet(
        self,
        *,
        snippet_id: str,
        user_id: str,
        changes: dict[str, Any],
    ) -> SnippetRecord | None:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        assignments: list[str] = []
        params: list[Any] = []
        for name in sorted(changes):
            value = changes[name]
            if name == "tags":
                assignments.append("tags_json = ?")
                params.append(json.dumps(list(value or [])))
            else:
                assignments.append(f"{name} = ?")
                params.append(value)
        assignments.append("updated_at = ?")
        params.append(_utcnow())
        params.extend([snippet_id, user_id])

        row = self._conn.execute(
            f"""
            UPDATE snippets
            SET {", ".join(assignments)}
            WHERE id = ? AND user_id = ?
            RETURNING {_SELECT_COLUMNS}
            """,
            params,
        ).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    def delete_snippet(self, *, snippet_id: str, user_id: str) -> bool:
        row = self._conn.execute(
            """
            DELETE FROM snippets
            WHERE id = ? AND user_id = ?
            RETURNING id
            """,
            [snippet_id, user_id],
        ).fetchone()
        return row is not None

    def record_usage(self, *, snippet_id: str, user_id: str) -> SnippetRecord | None:
        row = self._conn.execute(
            f"""
            UPDATE snippets
            SET usage_count = coalesce(usage_count, 0) + 1,
                last_used_at = ?
            WHERE id = ? AND user_id = ?
            RETURNING {_SELECT_COLUMNS}
            """,
            [_utcnow(), snippet_id, user_id],
        ).fetchone()
        if row is None:
            return None
        return self._row_to_record(row)

    @staticmethod
    def _row_to_record(row: tuple[Any, ...]) -> SnippetRecord:
        return SnippetRecord(
            id=str(row[0]),
            user_id=str(row[1]),
            title=str(row[2]),
            description=None if row[3] is None else str(row[3]),
            code=str(row[4]),
            language=str(row[5]),
            tags=[str(tag) for tag in json.loads(str(row[6]) or "[]")],
            embedding=None if row[7] is None else str(row[7]),
            framework=None if row[8] is None else str(row[8]),
            complexity=None if row[9] is None else str(row[9]),
            is_public=bool(row[10]),
            is_favorite=bool(row[11]),
            usage_count=int(row[12] or 0),
            last_used_at=row[13],
            created_at=row[14],
            updated_at=row[15],
        )
