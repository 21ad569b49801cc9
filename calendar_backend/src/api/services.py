"""
Use-cases behind the HTTP routers.

Each function takes the repository plus a plain parameter set, validates the
owner email before touching the store, runs one store query and returns a
plain result. Store failures propagate unchanged.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, List, Optional

from . import conflicts, reports
from .errors import EventNotFoundError, EventValidationError
from .models import EventEntity
from .repositories import EventQuery, Repository, normalize_sort_field
from .schemas import EventCreate, EventPatch, EventSearch, EventUpdate
from .serializers import export_document, import_items, parse_import_item, to_detail
from .utils import pagination_envelope

logger = logging.getLogger(__name__)

# Fields an event can never be without; a PATCH may not null them
_REQUIRED_FIELDS = frozenset({"title", "date", "time", "email"})


def _require_owner(email: Optional[str]) -> str:
    owner = (email or "").strip()
    if not owner:
        raise EventValidationError("email is required")
    return owner


def _require_text(value: Optional[str], name: str) -> str:
    s = (value or "").strip()
    if not s:
        raise EventValidationError(f"{name} is required")
    return s


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def _all_events(repo: Repository, query: EventQuery) -> List[EventEntity]:
    items, _ = repo.list(query)
    return items


# PUBLIC_INTERFACE
def search_events(repo: Repository, search: EventSearch) -> Dict[str, Any]:
    """
    Filter, sort and page one owner's events.

    A start date after the end date is not rejected; it simply matches
    nothing. Unknown sort fields sort by date (then time) and any direction
    other than 'desc' sorts ascending.

    Raises:
        EventValidationError: if the owner email is blank.
    """
    owner = _require_owner(search.email)
    page, page_size = search.page, search.page_size
    query = EventQuery(
        owner_email=owner,
        start_date=search.start_date,
        end_date=search.end_date,
        type=_clean(search.type),
        client=_clean(search.client),
        search=_clean(search.search_term),
        sort_by=normalize_sort_field(search.sort_by),
        descending=(search.sort_direction or "").strip().lower() == "desc",
        offset=(page - 1) * page_size,
        limit=page_size,
    )
    items, total = repo.list(query)
    logger.debug("Search for %s matched %d events (page %d)", owner, total, page)
    return pagination_envelope([to_detail(e) for e in items], total, page, page_size)


# PUBLIC_INTERFACE
def list_events(repo: Repository, email: Optional[str]) -> List[EventEntity]:
    """All of an owner's events ordered by date then time."""
    return _all_events(repo, EventQuery(owner_email=_require_owner(email)))


# PUBLIC_INTERFACE
def upcoming_events(
    repo: Repository, email: Optional[str], days: int = 7, today: Optional[dt.date] = None
) -> List[EventEntity]:
    """Events dated from today through today + `days`, both inclusive."""
    owner = _require_owner(email)
    start = today or dt.date.today()
    return _all_events(
        repo,
        EventQuery(owner_email=owner, start_date=start, end_date=start + dt.timedelta(days=days)),
    )


# PUBLIC_INTERFACE
def events_by_type(repo: Repository, email: Optional[str], event_type: Optional[str]) -> List[EventEntity]:
    owner = _require_owner(email)
    return _all_events(repo, EventQuery(owner_email=owner, type=_require_text(event_type, "type")))


# PUBLIC_INTERFACE
def events_by_client(repo: Repository, email: Optional[str], client: Optional[str]) -> List[EventEntity]:
    owner = _require_owner(email)
    return _all_events(repo, EventQuery(owner_email=owner, client=_require_text(client, "client")))


# PUBLIC_INTERFACE
def create_event(repo: Repository, data: EventCreate) -> EventEntity:
    created = repo.create(data)
    logger.info("Created event %d for %s", created["id"], created["email"])
    return created


# PUBLIC_INTERFACE
def get_event(repo: Repository, event_id: int) -> EventEntity:
    """
    Raises:
        EventNotFoundError: if no event has this id.
    """
    item = repo.get(event_id)
    if item is None:
        raise EventNotFoundError(event_id)
    return item


# PUBLIC_INTERFACE
def update_event(repo: Repository, event_id: int, data: EventUpdate) -> EventEntity:
    """
    Replace every mutable field of an event. There is no concurrency check:
    of two concurrent updates the last one written wins.
    """
    updated = repo.update(event_id, data.model_dump())
    if updated is None:
        raise EventNotFoundError(event_id)
    logger.info("Updated event %d", event_id)
    return updated


# PUBLIC_INTERFACE
def patch_event(repo: Repository, event_id: int, data: EventPatch) -> EventEntity:
    """Update only the fields present in the payload."""
    fields = {
        name: value
        for name, value in data.model_dump(exclude_unset=True).items()
        if not (name in _REQUIRED_FIELDS and value is None)
    }
    updated = repo.update(event_id, fields)
    if updated is None:
        raise EventNotFoundError(event_id)
    logger.info("Patched event %d (%s)", event_id, ", ".join(sorted(fields)) or "no fields")
    return updated


# PUBLIC_INTERFACE
def delete_event(repo: Repository, event_id: int) -> None:
    if not repo.delete(event_id):
        raise EventNotFoundError(event_id)
    logger.info("Deleted event %d", event_id)


# PUBLIC_INTERFACE
def event_statistics(
    repo: Repository, email: Optional[str], today: Optional[dt.date] = None
) -> Dict[str, int]:
    owner = _require_owner(email)
    events = _all_events(repo, EventQuery(owner_email=owner))
    return reports.statistics(events, today or dt.date.today())


# PUBLIC_INTERFACE
def period_report(
    repo: Repository, email: Optional[str], start_date: dt.date, end_date: dt.date
) -> Dict[str, Any]:
    """Month, type and day-of-week breakdown of events inside [start_date, end_date]."""
    owner = _require_owner(email)
    events = _all_events(
        repo, EventQuery(owner_email=owner, start_date=start_date, end_date=end_date)
    )
    logger.debug("Period report for %s over %d events", owner, len(events))
    return reports.period_report(events, start_date, end_date)


# PUBLIC_INTERFACE
def client_productivity_report(repo: Repository, email: Optional[str]) -> Dict[str, Any]:
    owner = _require_owner(email)
    events = _all_events(repo, EventQuery(owner_email=owner))
    return {"data": reports.client_productivity(events)}


# PUBLIC_INTERFACE
def temporal_trends_report(
    repo: Repository, email: Optional[str], months: int = 12, today: Optional[dt.date] = None
) -> Dict[str, Any]:
    """
    Trends over events dated on or after `months` calendar months before today.

    Raises:
        EventValidationError: if the owner email is blank or months < 1.
    """
    owner = _require_owner(email)
    if months < 1:
        raise EventValidationError("months must be at least 1")
    start = reports.months_before(today or dt.date.today(), months)
    events = _all_events(repo, EventQuery(owner_email=owner, start_date=start))
    return reports.temporal_trends(events, months)


# PUBLIC_INTERFACE
def time_conflicts_report(
    repo: Repository, email: Optional[str], target_date: Optional[dt.date] = None
) -> Dict[str, Any]:
    """Adjacent one-hour overlaps among the owner's events on one day (default today)."""
    owner = _require_owner(email)
    day = target_date or dt.date.today()
    events = _all_events(repo, EventQuery(owner_email=owner, start_date=day, end_date=day))
    return conflicts.conflict_report(events, day)


# PUBLIC_INTERFACE
def export_events(repo: Repository, email: Optional[str]) -> Dict[str, Any]:
    """Export document of every event of the owner, ordered by date then time."""
    return export_document(list_events(repo, email))


# PUBLIC_INTERFACE
def import_events(repo: Repository, payload: Any) -> int:
    """
    Create an event for every usable item of an export document and return
    how many were created. Unusable items are skipped without error.

    Raises:
        EventValidationError: if the payload has no "data" list.
    """
    created = 0
    skipped = 0
    for raw in import_items(payload):
        data = parse_import_item(raw)
        if data is None:
            skipped += 1
            continue
        repo.create(data)
        created += 1

    if skipped:
        logger.warning("Import skipped %d malformed item(s)", skipped)
    logger.info("Imported %d event(s)", created)
    return created
