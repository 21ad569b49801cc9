from __future__ import annotations

import datetime as dt
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator, List, Mapping, Optional, Tuple

from .models import EventEntity
from .repositories import MUTABLE_FIELDS, EventQuery, Repository, normalize_sort_field, utc_now
from .schemas import EventCreate


@dataclass(frozen=True)
class _Cols:
    table: str = "events"
    id: str = "id"
    title: str = "title"
    date: str = "date"
    time: str = "time"
    client: str = "client"
    type: str = "type"
    reminder_minutes: str = "reminder_minutes"
    notes: str = "notes"
    email: str = "email"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()

_ORDER_COLUMNS = {
    "title": (_COLS.title,),
    "type": (_COLS.type,),
    "client": (_COLS.client,),
    "date": (_COLS.date, _COLS.time),
}


def _py_lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value is not None else None


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.
    Dates and times are stored as ISO text so lexical order matches
    chronological order.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        # SQLite's lower() only folds ASCII
        conn.create_function("py_lower", 1, _py_lower, deterministic=True)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            # AUTOINCREMENT keeps deleted ids from being handed out again
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.date} TEXT NOT NULL,
                    {_COLS.time} TEXT NOT NULL,
                    {_COLS.client} TEXT NULL,
                    {_COLS.type} TEXT NULL,
                    {_COLS.reminder_minutes} INTEGER NULL,
                    {_COLS.notes} TEXT NULL,
                    {_COLS.email} TEXT NOT NULL,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_email ON {_COLS.table}({_COLS.email})"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_email_date "
                f"ON {_COLS.table}({_COLS.email}, {_COLS.date})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> EventEntity:
        reminder = row[_COLS.reminder_minutes]
        return {
            "id": int(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "date": dt.date.fromisoformat(row[_COLS.date]),
            "time": dt.time.fromisoformat(row[_COLS.time]),
            "client": row[_COLS.client],
            "type": row[_COLS.type],
            "reminder_minutes": int(reminder) if reminder is not None else None,
            "notes": row[_COLS.notes],
            "email": str(row[_COLS.email]),
            "created_at": dt.datetime.fromisoformat(row[_COLS.created_at]),
            "updated_at": dt.datetime.fromisoformat(row[_COLS.updated_at]),
        }

    @staticmethod
    def _to_column(name: str, value: Any) -> Any:
        if value is None:
            return None
        if name in {"date", "time"}:
            return value.isoformat()
        return value

    def _fetch(self, conn: sqlite3.Connection, event_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(
            f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (event_id,)
        ).fetchone()

    def create(self, data: EventCreate) -> EventEntity:
        now = utc_now().isoformat()
        with self._conn() as conn:
            cur = conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.title}, {_COLS.date}, {_COLS.time}, {_COLS.client},
                    {_COLS.type}, {_COLS.reminder_minutes}, {_COLS.notes}, {_COLS.email},
                    {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    data.title,
                    data.date.isoformat(),
                    data.time.isoformat(),
                    data.client,
                    data.type,
                    data.reminder_minutes,
                    data.notes,
                    data.email,
                    now,
                    now,
                ),
            )
            row = self._fetch(conn, cur.lastrowid)
            assert row is not None
            return self._row_to_entity(row)

    def get(self, event_id: int) -> Optional[EventEntity]:
        with self._conn() as conn:
            row = self._fetch(conn, event_id)
            return self._row_to_entity(row) if row else None

    def update(self, event_id: int, fields: Mapping[str, Any]) -> Optional[EventEntity]:
        with self._conn() as conn:
            if not self._fetch(conn, event_id):
                return None

            names = [n for n in MUTABLE_FIELDS if n in fields]
            assignments = [f"{getattr(_COLS, n)} = ?" for n in names]
            params: list = [self._to_column(n, fields[n]) for n in names]
            assignments.append(f"{_COLS.updated_at} = ?")
            params.append(utc_now().isoformat())

            conn.execute(
                f"UPDATE {_COLS.table} SET {', '.join(assignments)} WHERE {_COLS.id} = ?",
                [*params, event_id],
            )
            row = self._fetch(conn, event_id)
            assert row is not None
            return self._row_to_entity(row)

    def delete(self, event_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (event_id,))
            return cur.rowcount > 0

    def list(self, query: EventQuery) -> Tuple[List[EventEntity], int]:
        q = query
        clauses = [f"{_COLS.email} = ?"]
        params: list = [q.owner_email]

        if q.start_date is not None:
            clauses.append(f"{_COLS.date} >= ?")
            params.append(q.start_date.isoformat())
        if q.end_date is not None:
            clauses.append(f"{_COLS.date} <= ?")
            params.append(q.end_date.isoformat())

        # instr() keeps '%' and '_' in user input literal
        if q.type:
            clauses.append(f"instr(py_lower({_COLS.type}), ?) > 0")
            params.append(q.type.lower())
        if q.client:
            clauses.append(f"instr(py_lower({_COLS.client}), ?) > 0")
            params.append(q.client.lower())
        if q.search:
            s = q.search.lower()
            clauses.append(
                f"(instr(py_lower({_COLS.title}), ?) > 0"
                f" OR instr(py_lower({_COLS.notes}), ?) > 0"
                f" OR instr(py_lower({_COLS.client}), ?) > 0)"
            )
            params.extend([s, s, s])

        where_sql = f"WHERE {' AND '.join(clauses)}"

        direction = "DESC" if q.descending else "ASC"
        columns = (*_ORDER_COLUMNS[normalize_sort_field(q.sort_by)], _COLS.id)
        order_sql = "ORDER BY " + ", ".join(f"{c} {direction}" for c in columns)

        page_sql = ""
        page_params: list = []
        if q.limit is not None:
            page_sql = "LIMIT ? OFFSET ?"
            page_params = [max(q.limit, 0), max(q.offset, 0)]
        elif q.offset:
            page_sql = "LIMIT -1 OFFSET ?"
            page_params = [max(q.offset, 0)]

        with self._conn() as conn:
            count_row = conn.execute(
                f"SELECT COUNT(*) as cnt FROM {_COLS.table} {where_sql}", params
            ).fetchone()
            total = int(count_row["cnt"]) if count_row else 0

            rows = conn.execute(
                f"""
                SELECT * FROM {_COLS.table}
                {where_sql}
                {order_sql}
                {page_sql}
                """,
                [*params, *page_params],
            ).fetchall()
            return [self._row_to_entity(r) for r in rows], total
