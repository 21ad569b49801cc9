"""Naive same-day scheduling conflict detection."""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Sequence

from .models import EventEntity

# Events carry only a start time; each one is assumed to last this long.
DEFAULT_EVENT_DURATION = dt.timedelta(hours=1)


def _seconds(t: dt.time) -> float:
    return t.hour * 3600 + t.minute * 60 + t.second + t.microsecond / 1_000_000


def _summary(e: EventEntity) -> Dict[str, Any]:
    return {"id": e["id"], "title": e["title"], "time": e["time"]}


# PUBLIC_INTERFACE
def find_conflicts(
    events: Sequence[EventEntity],
    duration: dt.timedelta = DEFAULT_EVENT_DURATION,
) -> List[Dict[str, Any]]:
    """Return overlaps between adjacent events of a single day.

    Events are ordered by start time and every event is assumed to last
    `duration`. Only neighbours are compared: an event whose window also
    covers a later, non-adjacent event is not reported against it. An event
    ending exactly when the next one starts is not a conflict.

    Args:
        events: The day's events, in any order.
        duration: Assumed length of every event.

    Returns:
        A list of ``{"event1", "event2", "overlap_minutes"}`` records.
    """
    ordered = sorted(events, key=lambda e: (e["time"], e["id"]))
    span = duration.total_seconds()

    conflicts: List[Dict[str, Any]] = []
    for current, following in zip(ordered, ordered[1:]):
        # Seconds arithmetic lets a late event's window run past midnight
        current_end = _seconds(current["time"]) + span
        next_start = _seconds(following["time"])
        if current_end > next_start:
            conflicts.append(
                {
                    "event1": _summary(current),
                    "event2": _summary(following),
                    "overlap_minutes": (current_end - next_start) / 60,
                }
            )
    return conflicts


# PUBLIC_INTERFACE
def conflict_report(events: Sequence[EventEntity], target_date: dt.date) -> Dict[str, Any]:
    """Conflict summary for one owner's events on `target_date`."""
    conflicts = find_conflicts(events)
    return {
        "date": target_date.isoformat(),
        "total_events": len(events),
        "conflicts": conflicts,
        "has_conflicts": bool(conflicts),
    }
