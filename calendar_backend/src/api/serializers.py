"""
Boundary shapes for events: the detail projection returned by the API and
the localized projection used by the bulk export/import file.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from .errors import EventValidationError
from .models import EventEntity
from .schemas import EventCreate, EventOut, parse_event_date, parse_event_time

# Export/import field names, kept stable for compatibility with existing files
EXPORT_TITLE = "Titulo"
EXPORT_DATE = "Data"
EXPORT_TIME = "Hora"
EXPORT_CLIENT = "Cliente"
EXPORT_TYPE = "Tipo"
EXPORT_REMINDER = "Lembrete"
EXPORT_NOTES = "Notas"
EXPORT_EMAIL = "email"


# PUBLIC_INTERFACE
def to_detail(entity: EventEntity) -> EventOut:
    """Detail shape: every stored field as-is."""
    return EventOut(**entity)  # type: ignore[arg-type]


# PUBLIC_INTERFACE
def to_export_item(entity: EventEntity) -> Dict[str, Any]:
    """
    Localized projection of one event. Dates render as YYYY-MM-DD, times as
    HH:MM:SS and the reminder as a string (empty when absent, never null).
    """
    reminder = entity["reminder_minutes"]
    return {
        EXPORT_TITLE: entity["title"],
        EXPORT_DATE: entity["date"].strftime("%Y-%m-%d"),
        EXPORT_TIME: entity["time"].isoformat(),
        EXPORT_CLIENT: entity["client"],
        EXPORT_TYPE: entity["type"],
        EXPORT_REMINDER: str(reminder) if reminder is not None else "",
        EXPORT_NOTES: entity["notes"],
        EXPORT_EMAIL: entity["email"],
    }


# PUBLIC_INTERFACE
def export_document(events: Iterable[EventEntity]) -> Dict[str, List[Dict[str, Any]]]:
    return {"data": [to_export_item(e) for e in events]}


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _parse_reminder(value: Any) -> Optional[int]:
    # Only a string holding an integer counts; anything else means no reminder
    if not isinstance(value, str):
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


# PUBLIC_INTERFACE
def import_items(payload: Any) -> List[Any]:
    """
    Return the raw item list of an import document shaped as {"data": [...]}.

    Raises:
        EventValidationError: if the document has no "data" list.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        raise EventValidationError('invalid payload, expected { "data": [ ... ] }')
    return payload["data"]


# PUBLIC_INTERFACE
def parse_import_item(raw: Any) -> Optional[EventCreate]:
    """
    Inverse of to_export_item. Returns None for an item that cannot become an
    event: missing title, date, time or email, an unparsable date or time, or
    any other field the create schema rejects.
    """
    if not isinstance(raw, dict):
        return None

    title = _text(raw.get(EXPORT_TITLE))
    date_str = _text(raw.get(EXPORT_DATE))
    time_str = _text(raw.get(EXPORT_TIME))
    email = _text(raw.get(EXPORT_EMAIL))
    if not (title and date_str and time_str and email):
        return None

    try:
        event_date = parse_event_date(date_str)
        event_time = parse_event_time(time_str)
    except ValueError:
        return None

    try:
        return EventCreate(
            title=title,
            date=event_date,
            time=event_time,
            client=_text(raw.get(EXPORT_CLIENT)),
            type=_text(raw.get(EXPORT_TYPE)),
            reminder_minutes=_parse_reminder(raw.get(EXPORT_REMINDER)),
            notes=_text(raw.get(EXPORT_NOTES)),
            email=email,
        )
    except ValidationError:
        return None
