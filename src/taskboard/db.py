from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional, Tuple

from .models import TaskEntity
from .repositories import ListQuery, Repository
from .schemas import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    owner_id: str = "owner_id"
    title: str = "title"
    description: str = "description"
    completed: str = "completed"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()

_UPDATABLE = {_COLS.title, _COLS.description, _COLS.completed}


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository. Each call opens its own connection.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()
        logger.info("Using sqlite task repository db=%s", db_path)

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
                    {_COLS.owner_id} INTEGER NOT NULL,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.description} TEXT NULL,
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_owner_created "
                f"ON {_COLS.table}({_COLS.owner_id}, {_COLS.created_at})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": int(row[_COLS.id]),
            "owner_id": int(row[_COLS.owner_id]),
            "title": str(row[_COLS.title]),
            "description": row[_COLS.description],
            "completed": bool(row[_COLS.completed]),
            "created_at": datetime.fromisoformat(row[_COLS.created_at]),
            "updated_at": datetime.fromisoformat(row[_COLS.updated_at]),
        }

    def _select(self, conn: sqlite3.Connection, task_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)).fetchone()

    def create(self, owner_id: int, data: TaskCreate) -> TaskEntity:
        now = datetime.now().isoformat(timespec="microseconds")
        with self._conn() as conn:
            cur = conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.owner_id}, {_COLS.title}, {_COLS.description},
                    {_COLS.completed}, {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (owner_id, data.title, data.description, 1 if data.completed else 0, now, now),
            )
            row = self._select(conn, int(cur.lastrowid))
            assert row is not None
            return self._row_to_entity(row)

    def get(self, task_id: int) -> Optional[TaskEntity]:
        with self._conn() as conn:
            row = self._select(conn, task_id)
            return self._row_to_entity(row) if row else None

    def update(self, task_id: int, data: TaskUpdate) -> Optional[TaskEntity]:
        changes = {k: v for k, v in data.changes().items() if k in _UPDATABLE}
        if _COLS.completed in changes:
            changes[_COLS.completed] = 1 if changes[_COLS.completed] else 0
        changes[_COLS.updated_at] = datetime.now().isoformat(timespec="microseconds")

        assignments = ", ".join(f"{name} = ?" for name in changes)
        with self._conn() as conn:
            cur = conn.execute(
                f"UPDATE {_COLS.table} SET {assignments} WHERE {_COLS.id} = ?",
                [*changes.values(), task_id],
            )
            if cur.rowcount == 0:
                return None
            row = self._select(conn, task_id)
            assert row is not None
            return self._row_to_entity(row)

    def delete(self, task_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            return cur.rowcount > 0

    def list_for_owner(self, query: ListQuery) -> Tuple[List[TaskEntity], int]:
        with self._conn() as conn:
            count_row = conn.execute(
                f"SELECT COUNT(*) AS cnt FROM {_COLS.table} WHERE {_COLS.owner_id} = ?",
                (query.owner_id,),
            ).fetchone()
            total = int(count_row["cnt"]) if count_row else 0

            rows = conn.execute(
                f"""
                SELECT * FROM {_COLS.table}
                WHERE {_COLS.owner_id} = ?
                ORDER BY {_COLS.created_at} DESC, {_COLS.id} DESC
                LIMIT ? OFFSET ?
                """,
                (query.owner_id, max(query.per_page, 0), query.offset),
            ).fetchall()
            return [self._row_to_entity(r) for r in rows], total
