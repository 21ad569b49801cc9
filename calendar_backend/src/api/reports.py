"""
Grouped summaries over an already-loaded, owner-scoped list of events.

Every function here is pure: callers fetch the events once and the grouping
happens in memory, so no report issues more than one store query.
"""
from __future__ import annotations

import calendar
import datetime as dt
from collections import Counter, defaultdict
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .models import EventEntity

# Indexed by date.weekday()
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def _percentage(count: int, denominator: int) -> float:
    """Share of `denominator` as a percentage, rounded to 2 places with round()."""
    if denominator <= 0:
        return 0.0
    return round(count / denominator * 100, 2)


def _type_counts(events: Iterable[EventEntity]) -> List[Dict[str, Any]]:
    counts = Counter(e["type"] for e in events if e["type"])
    return [{"type": t, "count": c} for t, c in counts.items()]


def _month_key(day: dt.date) -> str:
    return f"{day.year}-{day.month:02d}"


# PUBLIC_INTERFACE
def events_by_month(events: Sequence[EventEntity]) -> List[Dict[str, Any]]:
    """
    One row per YYYY-MM period holding the count and a short summary of each
    event, ordered by period ascending.
    """
    groups: Dict[str, List[EventEntity]] = defaultdict(list)
    for e in events:
        groups[_month_key(e["date"])].append(e)

    return [
        {
            "period": period,
            "count": len(group),
            "events": [
                {"id": e["id"], "title": e["title"], "date": e["date"], "type": e["type"]}
                for e in group
            ],
        }
        for period, group in sorted(groups.items())
    ]


# PUBLIC_INTERFACE
def events_by_type(events: Sequence[EventEntity]) -> List[Dict[str, Any]]:
    """
    Count and percentage per type, ordered by count descending.

    Events without a type are left out of both the rows and the percentage
    denominator, so the percentages of the rows add up to 100.
    """
    typed = [e for e in events if e["type"]]
    counts = Counter(e["type"] for e in typed)
    return [
        {"type": t, "count": c, "percentage": _percentage(c, len(typed))}
        for t, c in counts.most_common()
    ]


# PUBLIC_INTERFACE
def events_by_day_of_week(events: Sequence[EventEntity]) -> List[Dict[str, Any]]:
    """Count per English day name, ordered alphabetically by name."""
    counts = Counter(DAY_NAMES[e["date"].weekday()] for e in events)
    return [{"day_of_week": day, "count": counts[day]} for day in sorted(counts)]


# PUBLIC_INTERFACE
def period_report(
    events: Sequence[EventEntity], start_date: dt.date, end_date: dt.date
) -> Dict[str, Any]:
    """Period report for events already bounded to [start_date, end_date]."""
    return {
        "summary": {
            "total_events": len(events),
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        },
        "events_by_month": events_by_month(events),
        "events_by_type": events_by_type(events),
        "events_by_day_of_week": events_by_day_of_week(events),
    }


# PUBLIC_INTERFACE
def client_productivity(events: Sequence[EventEntity]) -> List[Dict[str, Any]]:
    """
    Per-client activity for every event with a non-empty client.

    The monthly average divides the event count by the span between the
    first and last event in 30-day months, floored at one month; a client
    with a single event therefore averages its own count.
    """
    groups: Dict[str, List[EventEntity]] = defaultdict(list)
    for e in events:
        if e["client"]:
            groups[e["client"]].append(e)

    rows: List[Dict[str, Any]] = []
    for client, group in groups.items():
        dates = [e["date"] for e in group]
        first, last = min(dates), max(dates)
        months = (last - first).days / 30.0
        rows.append(
            {
                "client": client,
                "total_events": len(group),
                "first_event": first,
                "last_event": last,
                "event_types": _type_counts(group),
                "average_events_per_month": round(len(group) / max(1.0, months), 2),
            }
        )

    rows.sort(key=lambda r: r["total_events"], reverse=True)
    return rows


# PUBLIC_INTERFACE
def months_before(day: dt.date, months: int) -> dt.date:
    """Shift `day` back by whole calendar months, clamping to the month's last day."""
    index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return dt.date(year, month, min(day.day, last_day))


# PUBLIC_INTERFACE
def temporal_trends(events: Sequence[EventEntity], months: int) -> Dict[str, Any]:
    """
    Monthly trend with per-type breakdown, hour-of-day and reminder lead time
    distributions over a trailing window of `months` months.

    Hour and reminder percentages use the whole event set as denominator.
    """
    total = len(events)

    monthly: Dict[tuple, List[EventEntity]] = defaultdict(list)
    for e in events:
        monthly[(e["date"].year, e["date"].month)].append(e)
    monthly_trend = [
        {"year": year, "month": month, "count": len(group), "types": _type_counts(group)}
        for (year, month), group in sorted(monthly.items())
    ]

    hours = Counter(e["time"].hour for e in events)
    time_analysis = [
        {"hour": hour, "count": c, "percentage": _percentage(c, total)}
        for hour, c in hours.most_common()
    ]

    reminders = Counter(e["reminder_minutes"] for e in events if e["reminder_minutes"] is not None)
    reminder_analysis = [
        {"reminder_minutes": minutes, "count": c, "percentage": _percentage(c, total)}
        for minutes, c in sorted(reminders.items())
    ]

    most_active_month: Optional[int] = None
    if monthly_trend:
        most_active_month = max(monthly_trend, key=lambda row: row["count"])["month"]

    return {
        "monthly_trend": monthly_trend,
        "time_analysis": time_analysis,
        "reminder_analysis": reminder_analysis,
        "summary": {
            "total_events": total,
            "average_events_per_month": round(total / months, 2) if months > 0 else 0.0,
            "most_active_month": most_active_month,
            "most_active_hour": time_analysis[0]["hour"] if time_analysis else None,
        },
    }


def week_bounds(today: dt.date) -> tuple:
    """Return [start, end) of the Sunday-based week containing `today`."""
    # weekday(): Monday=0 .. Sunday=6
    start = today - dt.timedelta(days=(today.weekday() + 1) % 7)
    return start, start + dt.timedelta(days=7)


# PUBLIC_INTERFACE
def statistics(events: Sequence[EventEntity], today: dt.date) -> Dict[str, int]:
    """
    Named counters for an owner's events: total, this_month, this_week,
    upcoming, plus one `type_<name>` counter per distinct non-empty type.
    """
    week_start, week_end = week_bounds(today)
    stats: Dict[str, int] = {
        "total": len(events),
        "this_month": sum(
            1 for e in events if e["date"].year == today.year and e["date"].month == today.month
        ),
        "this_week": sum(1 for e in events if week_start <= e["date"] < week_end),
        "upcoming": sum(1 for e in events if e["date"] >= today),
    }
    for t, c in Counter(e["type"] for e in events if e["type"]).items():
        stats[f"type_{t}"] = c
    return stats
