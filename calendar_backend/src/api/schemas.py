from __future__ import annotations

import datetime as dt
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Incoming dates may be a date, a datetime, or an ISO8601 string
EventDateInput = Union[dt.date, dt.datetime, str]
EventTimeInput = Union[dt.time, str]

_TIME_FORMATS = ("%H:%M:%S", "%H:%M")


# PUBLIC_INTERFACE
def parse_event_date(value: Optional[EventDateInput]) -> Optional[dt.date]:
    """
    Normalize an event date input into a plain date.
    - datetimes (and ISO datetime strings) are truncated to their date
    - ISO date strings are parsed as-is
    """
    if value is None:
        return None

    if isinstance(value, dt.datetime):
        return value.date()

    if isinstance(value, dt.date):
        return value

    if isinstance(value, str):
        s = value.strip()
        try:
            return dt.date.fromisoformat(s)
        except ValueError:
            try:
                return dt.datetime.fromisoformat(s).date()
            except ValueError as e:
                raise ValueError(
                    "Invalid date format. Use an ISO8601 date or datetime string (e.g., '2025-01-31')."
                ) from e

    raise ValueError("Invalid type for date; expected date, datetime, or ISO8601 string.")


def _require_naive(value: dt.time) -> dt.time:
    if value.tzinfo is not None:
        raise ValueError("Time must not carry a UTC offset (e.g., '09:30', not '09:30+02:00').")
    return value


# PUBLIC_INTERFACE
def parse_event_time(value: Optional[EventTimeInput]) -> Optional[dt.time]:
    """
    Normalize a time-of-day input. Accepts time objects and 'HH:MM[:SS]' strings.
    Times with a UTC offset are rejected; event times are wall-clock times.
    """
    if value is None:
        return None

    if isinstance(value, dt.datetime):
        return value.time()

    if isinstance(value, dt.time):
        return _require_naive(value)

    if isinstance(value, str):
        s = value.strip()
        try:
            parsed = dt.time.fromisoformat(s)
        except ValueError:
            parsed = None
        if parsed is not None:
            return _require_naive(parsed)
        for fmt in _TIME_FORMATS:
            try:
                return dt.datetime.strptime(s, fmt).time()
            except ValueError:
                continue
        raise ValueError("Invalid time format. Use 'HH:MM' or 'HH:MM:SS' (e.g., '09:30').")

    raise ValueError("Invalid type for time; expected time or 'HH:MM[:SS]' string.")


def _strip_optional(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    s = v.strip()
    return s or None


class _EventFieldsMixin(BaseModel):
    """Shared normalization for event payloads."""

    @field_validator("date", mode="before", check_fields=False)
    @classmethod
    def parse_date(cls, v: Optional[EventDateInput]) -> Optional[dt.date]:
        """
        Normalize date from str/date/datetime to date.
        """
        return parse_event_date(v)

    @field_validator("time", mode="before", check_fields=False)
    @classmethod
    def parse_time(cls, v: Optional[EventTimeInput]) -> Optional[dt.time]:
        return parse_event_time(v)

    @field_validator("client", "type", "notes", check_fields=False)
    @classmethod
    def strip_optional_text(cls, v: Optional[str]) -> Optional[str]:
        """
        Blank optional text is stored as null.
        """
        return _strip_optional(v)


# PUBLIC_INTERFACE
class EventCreate(_EventFieldsMixin):
    """
    Schema for creating a new calendar event.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Kickoff meeting",
                "date": "2025-02-01",
                "time": "09:30",
                "client": "ACME",
                "type": "Meeting",
                "reminder_minutes": 15,
                "notes": "Bring the contract draft",
                "email": "owner@example.com",
            }
        }
    )

    title: str = Field(..., description="Event title", min_length=1, max_length=200)
    date: dt.date = Field(..., description="Event date. Accepts ISO8601 date or datetime; time is dropped")
    time: dt.time = Field(..., description="Start time of day (HH:MM or HH:MM:SS)")
    client: Optional[str] = Field(default=None, description="Optional client name")
    type: Optional[str] = Field(default=None, description="Optional category label")
    reminder_minutes: Optional[int] = Field(default=None, ge=0, description="Reminder lead time in minutes")
    notes: Optional[str] = Field(default=None, description="Optional notes")
    email: str = Field(..., description="Owner email", min_length=1)

    @field_validator("title", "email")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        """
        Strip whitespace and reject blank values.
        """
        s = v.strip()
        if not s:
            raise ValueError("value must not be blank")
        return s


# PUBLIC_INTERFACE
class EventUpdate(_EventFieldsMixin):
    """
    Schema for replacing an existing event. Every mutable field is required
    or reset to null when omitted.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Kickoff meeting (moved)",
                "date": "2025-02-02",
                "time": "14:00:00",
                "client": "ACME",
                "type": "Meeting",
                "reminder_minutes": 30,
                "notes": None,
                "email": "owner@example.com",
            }
        }
    )

    title: str = Field(..., description="Event title", min_length=3, max_length=200)
    date: dt.date = Field(..., description="Event date")
    time: dt.time = Field(..., description="Start time of day")
    client: Optional[str] = Field(default=None, max_length=100)
    type: Optional[str] = Field(default=None, max_length=50)
    reminder_minutes: Optional[int] = Field(default=None, ge=0, le=1440)
    notes: Optional[str] = Field(default=None, max_length=500)
    email: str = Field(..., description="Owner email", min_length=1)

    @field_validator("title", "email")
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("value must not be blank")
        return s


# PUBLIC_INTERFACE
class EventPatch(_EventFieldsMixin):
    """
    Schema for partially updating an event.
    All fields are optional; only provided fields will be updated.
    """

    title: Optional[str] = Field(default=None, min_length=3, max_length=200)
    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    client: Optional[str] = Field(default=None, max_length=100)
    type: Optional[str] = Field(default=None, max_length=50)
    reminder_minutes: Optional[int] = Field(default=None, ge=0, le=1440)
    notes: Optional[str] = Field(default=None, max_length=500)
    email: Optional[str] = Field(default=None, min_length=1)

    @field_validator("title", "email")
    @classmethod
    def validate_required_text(cls, v: Optional[str]) -> Optional[str]:
        """
        If provided, title and email must not be blank.
        """
        if v is None:
            return v
        s = v.strip()
        if not s:
            raise ValueError("value must not be blank")
        return s


# PUBLIC_INTERFACE
class EventOut(BaseModel):
    """
    Schema returned by the API for a calendar event.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 7,
                "title": "Kickoff meeting",
                "date": "2025-02-01",
                "time": "09:30:00",
                "client": "ACME",
                "type": "Meeting",
                "reminder_minutes": 15,
                "notes": None,
                "email": "owner@example.com",
                "created_at": "2025-01-25T10:15:30.123456Z",
                "updated_at": "2025-01-26T09:00:00.000001Z",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the event")
    title: str
    date: dt.date
    time: dt.time
    client: Optional[str] = None
    type: Optional[str] = None
    reminder_minutes: Optional[int] = None
    notes: Optional[str] = None
    email: str
    created_at: dt.datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: dt.datetime = Field(..., description="Last update timestamp (UTC)")


# PUBLIC_INTERFACE
class EventSearch(BaseModel):
    """
    Search request: owner email plus optional filters, sorting and paging.
    The email is checked by the service layer so a blank value is reported
    as a validation error rather than a malformed request.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "owner@example.com",
                "start_date": "2025-01-01",
                "end_date": "2025-03-31",
                "search_term": "contract",
                "page": 1,
                "page_size": 10,
                "sort_by": "date",
                "sort_direction": "asc",
            }
        }
    )

    email: str = Field(default="", description="Owner email (required)")
    start_date: Optional[dt.date] = Field(default=None, description="Inclusive lower date bound")
    end_date: Optional[dt.date] = Field(default=None, description="Inclusive upper date bound")
    type: Optional[str] = Field(default=None, description="Case-insensitive substring of the type")
    client: Optional[str] = Field(default=None, description="Case-insensitive substring of the client")
    search_term: Optional[str] = Field(
        default=None, description="Matches title, notes or client (case-insensitive substring)"
    )
    page: int = Field(default=1, ge=1, description="1-based page number")
    page_size: int = Field(default=10, ge=1, description="Items per page")
    sort_by: str = Field(default="date", description="title, type, client or date")
    sort_direction: str = Field(default="asc", description="asc or desc")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_bounds(cls, v: Optional[EventDateInput]) -> Optional[dt.date]:
        return parse_event_date(v)


# PUBLIC_INTERFACE
class PagedEvents(BaseModel):
    """
    Envelope for paginated search responses.
    """

    items: List[EventOut] = Field(..., description="Events on the requested page")
    total_count: int = Field(..., description="Total number of events matching the query")
    page: int
    page_size: int
    total_pages: int


class EventList(BaseModel):
    data: List[EventOut]


class ImportResult(BaseModel):
    created: int = Field(..., description="Number of events created by the import")


# Report shapes


class EventSummary(BaseModel):
    id: int
    title: str
    date: dt.date
    type: Optional[str] = None


class MonthGroup(BaseModel):
    period: str = Field(..., description="YYYY-MM")
    count: int
    events: List[EventSummary]


class TypeShare(BaseModel):
    type: str
    count: int
    percentage: float


class DayOfWeekCount(BaseModel):
    day_of_week: str
    count: int


class PeriodSummary(BaseModel):
    total_events: int
    start_date: str
    end_date: str


class PeriodReport(BaseModel):
    summary: PeriodSummary
    events_by_month: List[MonthGroup]
    events_by_type: List[TypeShare]
    events_by_day_of_week: List[DayOfWeekCount]


class TypeCount(BaseModel):
    type: str
    count: int


class ClientProductivity(BaseModel):
    client: str
    total_events: int
    first_event: dt.date
    last_event: dt.date
    event_types: List[TypeCount]
    average_events_per_month: float


class ClientProductivityReport(BaseModel):
    data: List[ClientProductivity]


class MonthlyTrend(BaseModel):
    year: int
    month: int
    count: int
    types: List[TypeCount]


class HourShare(BaseModel):
    hour: int
    count: int
    percentage: float


class ReminderShare(BaseModel):
    reminder_minutes: int
    count: int
    percentage: float


class TrendSummary(BaseModel):
    total_events: int
    average_events_per_month: float
    most_active_month: Optional[int] = None
    most_active_hour: Optional[int] = None


class TrendReport(BaseModel):
    monthly_trend: List[MonthlyTrend]
    time_analysis: List[HourShare]
    reminder_analysis: List[ReminderShare]
    summary: TrendSummary


class ConflictEvent(BaseModel):
    id: int
    title: str
    time: dt.time


class Conflict(BaseModel):
    event1: ConflictEvent
    event2: ConflictEvent
    overlap_minutes: float


class ConflictReport(BaseModel):
    date: str
    total_events: int
    conflicts: List[Conflict]
    has_conflicts: bool
