from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from .. import services
from ..repositories import Repository, get_repository
from ..schemas import (
    EventCreate,
    EventList,
    EventOut,
    EventPatch,
    EventSearch,
    EventUpdate,
    ImportResult,
    PagedEvents,
)
from ..serializers import to_detail
from ..utils import attachment_disposition

router = APIRouter(
    prefix="/api/v1/events",
    tags=["events"],
)


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=EventList,
    summary="List Events",
    description="List every event of an owner ordered by date and time.",
    responses={400: {"description": "email is missing"}},
)
def list_events(
    email: Optional[str] = Query(None, description="Owner email"),
    repo: Repository = Depends(_get_repo),
) -> EventList:
    items = services.list_events(repo, email)
    return EventList(data=[to_detail(e) for e in items])


# PUBLIC_INTERFACE
@router.post(
    "/search",
    response_model=PagedEvents,
    summary="Search Events",
    description=(
        "Search an owner's events.\n\n"
        "Body fields:\n"
        "- email: owner email (required)\n"
        "- start_date / end_date: inclusive date bounds\n"
        "- type / client: case-insensitive substring filters\n"
        "- search_term: matches title, notes or client\n"
        "- sort_by: title, type, client or date (default; ties broken by time)\n"
        "- sort_direction: asc or desc\n"
        "- page (1-based) / page_size\n\n"
        "Returns a pagination envelope with items, total_count and total_pages."
    ),
    responses={
        200: {"description": "Search completed"},
        400: {"description": "email is missing"},
    },
)
def search_events(payload: EventSearch, repo: Repository = Depends(_get_repo)) -> PagedEvents:
    return PagedEvents(**services.search_events(repo, payload))


# PUBLIC_INTERFACE
@router.get(
    "/upcoming",
    response_model=EventList,
    summary="Upcoming Events",
    description="Events dated from today through the next `days` days.",
)
def upcoming_events(
    email: Optional[str] = Query(None, description="Owner email"),
    days: int = Query(7, ge=0, description="Number of days ahead to include"),
    repo: Repository = Depends(_get_repo),
) -> EventList:
    items = services.upcoming_events(repo, email, days)
    return EventList(data=[to_detail(e) for e in items])


# PUBLIC_INTERFACE
@router.get(
    "/by-type",
    response_model=EventList,
    summary="Events By Type",
)
def events_by_type(
    email: Optional[str] = Query(None, description="Owner email"),
    type: Optional[str] = Query(None, description="Substring of the event type"),
    repo: Repository = Depends(_get_repo),
) -> EventList:
    items = services.events_by_type(repo, email, type)
    return EventList(data=[to_detail(e) for e in items])


# PUBLIC_INTERFACE
@router.get(
    "/by-client",
    response_model=EventList,
    summary="Events By Client",
)
def events_by_client(
    email: Optional[str] = Query(None, description="Owner email"),
    client: Optional[str] = Query(None, description="Substring of the client name"),
    repo: Repository = Depends(_get_repo),
) -> EventList:
    items = services.events_by_client(repo, email, client)
    return EventList(data=[to_detail(e) for e in items])


# PUBLIC_INTERFACE
@router.get(
    "/statistics",
    summary="Event Statistics",
    description="Counters for total, this month, this week, upcoming and one per event type.",
)
def event_statistics(
    email: Optional[str] = Query(None, description="Owner email"),
    repo: Repository = Depends(_get_repo),
) -> dict:
    return {"data": services.event_statistics(repo, email)}


# PUBLIC_INTERFACE
@router.get(
    "/export",
    summary="Export Events",
    description="Download every event of an owner as a JSON interchange file.",
    response_class=Response,
    responses={200: {"content": {"application/json": {}}}},
)
def export_events(
    email: Optional[str] = Query(None, description="Owner email"),
    repo: Repository = Depends(_get_repo),
) -> Response:
    document = services.export_events(repo, email)
    return Response(
        content=json.dumps(document, indent=2, ensure_ascii=False),
        media_type="application/json",
        headers={"Content-Disposition": attachment_disposition(f"events_{email.strip()}.json")},
    )


# PUBLIC_INTERFACE
@router.post(
    "/import",
    response_model=ImportResult,
    summary="Import Events",
    description=(
        'Create events from an export document shaped as { "data": [ ... ] }. '
        "Items missing a title, date, time or email, or with an unparsable date/time, are skipped."
    ),
    responses={400: {"description": "Payload has no data list"}},
)
def import_events(payload: Any = Body(...), repo: Repository = Depends(_get_repo)) -> ImportResult:
    return ImportResult(created=services.import_events(repo, payload))


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=EventOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Event",
    description="Create a new event and return the created resource.",
    responses={
        201: {"description": "Event created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_event(payload: EventCreate, repo: Repository = Depends(_get_repo)) -> EventOut:
    return to_detail(services.create_event(repo, payload))


# PUBLIC_INTERFACE
@router.get(
    "/{event_id}",
    response_model=EventOut,
    summary="Get Event",
    responses={
        200: {"description": "Event found"},
        404: {"description": "Event not found"},
    },
)
def get_event(event_id: int, repo: Repository = Depends(_get_repo)) -> EventOut:
    """
    Retrieve a single event by its ID.
    """
    return to_detail(services.get_event(repo, event_id))


# PUBLIC_INTERFACE
@router.put(
    "/{event_id}",
    response_model=EventOut,
    summary="Replace Event",
    description="Replace every mutable field of an event. Omitted optional fields are cleared.",
    responses={
        200: {"description": "Event updated"},
        404: {"description": "Event not found"},
    },
)
def put_event(event_id: int, payload: EventUpdate, repo: Repository = Depends(_get_repo)) -> EventOut:
    return to_detail(services.update_event(repo, event_id, payload))


# PUBLIC_INTERFACE
@router.patch(
    "/{event_id}",
    response_model=EventOut,
    summary="Update Event",
    description="Partially update fields of an event.",
    responses={
        200: {"description": "Event updated"},
        404: {"description": "Event not found"},
    },
)
def patch_event(event_id: int, payload: EventPatch, repo: Repository = Depends(_get_repo)) -> EventOut:
    return to_detail(services.patch_event(repo, event_id, payload))


# PUBLIC_INTERFACE
@router.delete(
    "/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Event",
    responses={
        204: {"description": "Event deleted"},
        404: {"description": "Event not found"},
    },
)
def delete_event(event_id: int, repo: Repository = Depends(_get_repo)) -> None:
    """
    Delete an event. Returns 204 on success, 404 if not found.
    """
    services.delete_event(repo, event_id)
    return None
