from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.exceptions import RequestValidationError

from .. import services
from ..repositories import Repository, get_repository
from ..schemas import ClientProductivityReport, ConflictReport, PeriodReport, TrendReport, parse_event_date

router = APIRouter(
    prefix="/api/v1/reports",
    tags=["reports"],
)


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    return repo


def _query_date(name: str, value: str) -> dt.date:
    # Datetime strings are accepted and truncated to their date
    try:
        return parse_event_date(value)
    except ValueError as e:
        raise RequestValidationError(
            [{"type": "date_parsing", "loc": ("query", name), "msg": str(e), "input": value}]
        ) from e


# PUBLIC_INTERFACE
@router.get(
    "/events-by-period",
    response_model=PeriodReport,
    summary="Events By Period",
    description=(
        "Events between start_date and end_date (inclusive) grouped by month, "
        "by type (with percentages of the typed events) and by day of week."
    ),
    responses={400: {"description": "email is missing"}},
)
def events_by_period(
    start_date: str = Query(..., description="Inclusive start date; a datetime is truncated to its date"),
    end_date: str = Query(..., description="Inclusive end date; a datetime is truncated to its date"),
    email: Optional[str] = Query(None, description="Owner email"),
    repo: Repository = Depends(_get_repo),
) -> PeriodReport:
    return PeriodReport(
        **services.period_report(
            repo, email, _query_date("start_date", start_date), _query_date("end_date", end_date)
        )
    )


# PUBLIC_INTERFACE
@router.get(
    "/client-productivity",
    response_model=ClientProductivityReport,
    summary="Client Productivity",
    description="Per-client totals, first/last event, type breakdown and monthly average.",
)
def client_productivity(
    email: Optional[str] = Query(None, description="Owner email"),
    repo: Repository = Depends(_get_repo),
) -> ClientProductivityReport:
    return ClientProductivityReport(**services.client_productivity_report(repo, email))


# PUBLIC_INTERFACE
@router.get(
    "/temporal-trends",
    response_model=TrendReport,
    summary="Temporal Trends",
    description="Monthly trend, busiest hours and reminder usage over the last `months` months.",
)
def temporal_trends(
    email: Optional[str] = Query(None, description="Owner email"),
    months: int = Query(12, ge=1, description="Size of the trailing window in months"),
    repo: Repository = Depends(_get_repo),
) -> TrendReport:
    return TrendReport(**services.temporal_trends_report(repo, email, months))


# PUBLIC_INTERFACE
@router.get(
    "/time-conflicts",
    response_model=ConflictReport,
    summary="Time Conflicts",
    description=(
        "Adjacent events on one day (default today) whose assumed one-hour "
        "duration overlaps the next event."
    ),
)
def time_conflicts(
    email: Optional[str] = Query(None, description="Owner email"),
    date: Optional[str] = Query(None, description="Day to inspect; defaults to today"),
    repo: Repository = Depends(_get_repo),
) -> ConflictReport:
    day = _query_date("date", date) if date else None
    return ConflictReport(**services.time_conflicts_report(repo, email, day))
