from __future__ import annotations

import datetime as dt
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class EventEntity(TypedDict):
    """
    A lightweight domain model representing a calendar event as held by the
    storage backends. Stores hand out copies; an update replaces the stored
    dict wholesale.

    Fields:
    - id: Unique integer identifier, never reused
    - title: Non-empty title
    - date: Calendar date of the event (no time-of-day component)
    - time: Time of day the event starts
    - client: Optional client name
    - type: Optional free-form category label
    - reminder_minutes: Optional reminder lead time in minutes
    - notes: Optional free text
    - email: Owner email; every owner-scoped query filters on it
    - created_at: UTC creation timestamp
    - updated_at: UTC last update timestamp
    """

    id: int
    title: str
    date: dt.date
    time: dt.time
    client: Optional[str]
    type: Optional[str]
    reminder_minutes: Optional[int]
    notes: Optional[str]
    email: str
    created_at: dt.datetime
    updated_at: dt.datetime
