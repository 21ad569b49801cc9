from __future__ import annotations

import datetime as dt
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from threading import RLock
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .models import EventEntity
from .schemas import EventCreate
from .settings import get_settings

SORT_FIELDS = frozenset({"title", "type", "client", "date"})
MUTABLE_FIELDS = (
    "title",
    "date",
    "time",
    "client",
    "type",
    "reminder_minutes",
    "notes",
    "email",
)


@dataclass(frozen=True)
class EventQuery:
    """
    Owner-scoped query over the event store.
    """
    owner_email: str
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None
    type: Optional[str] = None
    client: Optional[str] = None
    search: Optional[str] = None
    sort_by: str = "date"  # allowed: title, type, client, date
    descending: bool = False
    offset: int = 0
    limit: Optional[int] = None  # None returns every match


def normalize_sort_field(sort_by: Optional[str]) -> str:
    """Return a supported sort field; anything unknown sorts by date."""
    field = (sort_by or "").strip().lower()
    return field if field in SORT_FIELDS else "date"


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for event storage backends."""

    @abstractmethod
    def create(self, data: EventCreate) -> EventEntity:
        """Create and return a new EventEntity with a fresh id and timestamps."""

    @abstractmethod
    def get(self, event_id: int) -> Optional[EventEntity]:
        """Return an EventEntity by id, or None if not found."""

    @abstractmethod
    def update(self, event_id: int, fields: Mapping[str, Any]) -> Optional[EventEntity]:
        """Replace the given mutable fields. Return the updated entity or None if not found."""

    @abstractmethod
    def delete(self, event_id: int) -> bool:
        """Delete an EventEntity by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list(self, query: EventQuery) -> Tuple[List[EventEntity], int]:
        """
        Return a slice of the owner's events and the total count matching filters.
        - Inclusive date range
        - Case-insensitive substring filters on type and client
        - Free-text search across title, notes and client (any of them)
        - Sorting by title/type/client/date (date sorts by date then time),
          always ending with id so pages are stable
        - offset/limit slicing
        """


def _contains(haystack: Optional[str], needle: str) -> bool:
    return haystack is not None and needle in haystack.lower()


def _sort_key(field: str):
    if field == "title":
        return lambda e: (e["title"], e["id"])
    if field in {"type", "client"}:
        # None sorts before any string, as NULL does in SQLite
        return lambda e: (e[field] is not None, e[field] or "", e["id"])
    return lambda e: (e["date"], e["time"], e["id"])


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, EventEntity] = {}
        self._next_id = 1

    def _allocate_id(self) -> int:
        with self._lock:
            i = self._next_id
            self._next_id += 1
            return i

    def create(self, data: EventCreate) -> EventEntity:
        now = utc_now()
        entity: EventEntity = {
            "id": self._allocate_id(),
            "title": data.title,
            "date": data.date,
            "time": data.time,
            "client": data.client,
            "type": data.type,
            "reminder_minutes": data.reminder_minutes,
            "notes": data.notes,
            "email": data.email,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
        return entity.copy()

    def get(self, event_id: int) -> Optional[EventEntity]:
        with self._lock:
            item = self._items.get(event_id)
            return None if item is None else item.copy()

    def update(self, event_id: int, fields: Mapping[str, Any]) -> Optional[EventEntity]:
        with self._lock:
            existing = self._items.get(event_id)
            if existing is None:
                return None

            updated = existing.copy()
            for name in MUTABLE_FIELDS:
                if name in fields:
                    updated[name] = fields[name]  # type: ignore[literal-required]
            updated["updated_at"] = utc_now()

            self._items[event_id] = updated
            return updated.copy()

    def delete(self, event_id: int) -> bool:
        with self._lock:
            return self._items.pop(event_id, None) is not None

    def list(self, query: EventQuery) -> Tuple[List[EventEntity], int]:
        q = query
        with self._lock:
            items: Iterable[EventEntity] = [
                e for e in self._items.values() if e["email"] == q.owner_email
            ]

            # Filtering
            if q.start_date is not None:
                items = [e for e in items if e["date"] >= q.start_date]
            if q.end_date is not None:
                items = [e for e in items if e["date"] <= q.end_date]
            if q.type:
                t = q.type.lower()
                items = [e for e in items if _contains(e["type"], t)]
            if q.client:
                c = q.client.lower()
                items = [e for e in items if _contains(e["client"], c)]
            if q.search:
                s = q.search.lower()
                def matches(e: EventEntity) -> bool:
                    return _contains(e["title"], s) or _contains(e["notes"], s) or _contains(e["client"], s)
                items = [e for e in items if matches(e)]

            items = list(items)
            total = len(items)

            # Sorting
            field = normalize_sort_field(q.sort_by)
            items_sorted = sorted(items, key=_sort_key(field), reverse=q.descending)

            # Pagination
            start = max(q.offset, 0)
            end = None if q.limit is None else start + max(q.limit, 0)
            page = items_sorted[start:end]

            # Return copies to avoid external mutation
            return [e.copy() for e in page], total


# PUBLIC_INTERFACE
@lru_cache(maxsize=None)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured by settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository (stdlib sqlite3)
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        return SQLiteRepository(settings.sqlite_db_path)
    return InMemoryRepository()
