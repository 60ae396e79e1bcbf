from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Generator, List, Optional

from .models import Priority, TodoEntity
from .repositories import Repository, TodoQuery, _check_changes
from .utils import next_timestamp, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "todos"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    due_date: str = "due_date"
    completed: str = "completed"
    priority: str = "priority"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()

_PRIORITY_VALUES = ", ".join(f"'{p.value}'" for p in Priority)


def _ts(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


def _to_db(field: str, value: Any) -> Any:
    """Convert a python value into its column representation."""
    if value is None:
        return None
    if field == _COLS.completed:
        return 1 if value else 0
    if field == _COLS.priority:
        return Priority(value).value
    if field == _COLS.due_date and isinstance(value, date):
        return value.isoformat()
    return value


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.

    Dates are stored as text: ``due_date`` as ``YYYY-MM-DD`` and timestamps as
    ISO8601 UTC strings. Rows are returned in that raw form.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()
        logger.info("Using SQLite todo store at %s", db_path)

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.title} TEXT NOT NULL CHECK (length(trim({_COLS.title})) > 0),
                    {_COLS.description} TEXT NULL,
                    {_COLS.due_date} TEXT NULL,
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.priority} TEXT NULL CHECK ({_COLS.priority} IN ({_PRIORITY_VALUES})),
                    {_COLS.created_at} TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
                    {_COLS.updated_at} TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_completed ON {_COLS.table}({_COLS.completed})"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_priority ON {_COLS.table}({_COLS.priority})"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_created_at ON {_COLS.table}({_COLS.created_at})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TodoEntity:
        return {
            "id": int(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "description": row[_COLS.description],
            "due_date": row[_COLS.due_date],
            "completed": bool(row[_COLS.completed]),
            "priority": row[_COLS.priority],
            "created_at": row[_COLS.created_at],
            "updated_at": row[_COLS.updated_at],
        }

    def _fetch(self, conn: sqlite3.Connection, todo_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,)).fetchone()

    def create(
        self,
        title: str,
        description: Optional[str] = None,
        due_date: Any = None,
        priority: Optional[Priority] = None,
    ) -> TodoEntity:
        now = _ts(utcnow())
        with self._conn() as conn:
            cur = conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.title}, {_COLS.description}, {_COLS.due_date},
                    {_COLS.completed}, {_COLS.priority}, {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, 0, ?, ?, ?)
                """,
                (
                    title,
                    description,
                    _to_db(_COLS.due_date, due_date),
                    _to_db(_COLS.priority, priority),
                    now,
                    now,
                ),
            )
            row = self._fetch(conn, cur.lastrowid)
            assert row is not None
            return self._row_to_entity(row)

    def get(self, todo_id: int) -> Optional[TodoEntity]:
        with self._conn() as conn:
            row = self._fetch(conn, todo_id)
            return self._row_to_entity(row) if row else None

    def update(self, todo_id: int, changes: Dict[str, Any]) -> Optional[TodoEntity]:
        _check_changes(changes)
        with self._conn() as conn:
            current = conn.execute(
                f"SELECT {_COLS.updated_at} FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,)
            ).fetchone()
            if not current:
                return None

            # Column names come from MUTABLE_FIELDS only, never from input keys
            fields = sorted(changes)
            assignments = [f"{f} = ?" for f in fields] + [f"{_COLS.updated_at} = ?"]
            params = [_to_db(f, changes[f]) for f in fields]
            params.append(_ts(next_timestamp(current[_COLS.updated_at])))
            params.append(todo_id)

            conn.execute(
                f"UPDATE {_COLS.table} SET {', '.join(assignments)} WHERE {_COLS.id} = ?",
                params,
            )
            row = self._fetch(conn, todo_id)
            assert row is not None
            return self._row_to_entity(row)

    def delete(self, todo_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (todo_id,))
            return cur.rowcount > 0

    def list(self, query: Optional[TodoQuery] = None) -> List[TodoEntity]:
        q = query or TodoQuery()
        clauses = []
        params: list = []

        if q.completed is not None:
            clauses.append(f"{_COLS.completed} = ?")
            params.append(_to_db(_COLS.completed, q.completed))

        if q.priority is not None:
            clauses.append(f"{_COLS.priority} = ?")
            params.append(_to_db(_COLS.priority, q.priority))

        where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        # julianday() so rows filled by the CURRENT_TIMESTAMP default ('YYYY-MM-DD HH:MM:SS')
        # order correctly against the ISO8601 values written here
        with self._conn() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM {_COLS.table}
                {where_sql}
                ORDER BY julianday({_COLS.created_at}) DESC, {_COLS.id} DESC
                """,
                params,
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]
