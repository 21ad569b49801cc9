from datetime import date, datetime, time, timezone

import pytest

from src.api import reports

_TS = datetime(2024, 1, 1, tzinfo=timezone.utc)


def event(id, day, at="09:00", type=None, client=None, reminder=None, title=None):
    return {
        "id": id,
        "title": title or f"Event {id}",
        "date": date.fromisoformat(day),
        "time": time.fromisoformat(at),
        "client": client,
        "type": type,
        "reminder_minutes": reminder,
        "notes": None,
        "email": "owner@example.com",
        "created_at": _TS,
        "updated_at": _TS,
    }


class TestEventsByType:
    def test_percentages_ignore_untyped_events(self):
        events = [
            event(1, "2024-01-01", type="A"),
            event(2, "2024-01-02", type="A"),
            event(3, "2024-01-03", type="B"),
            event(4, "2024-01-04", type="A"),
            event(5, "2024-01-05"),
            event(6, "2024-01-06", type=""),
        ]
        rows = reports.events_by_type(events)
        assert rows == [
            {"type": "A", "count": 3, "percentage": 75.0},
            {"type": "B", "count": 1, "percentage": 25.0},
        ]
        assert sum(r["percentage"] for r in rows) == pytest.approx(100.0)

    def test_rounds_to_two_places(self):
        events = [event(1, "2024-01-01", type="A"), event(2, "2024-01-01", type="B"), event(3, "2024-01-01", type="C")]
        assert [r["percentage"] for r in reports.events_by_type(events)] == [33.33, 33.33, 33.33]

    def test_no_typed_events(self):
        assert reports.events_by_type([event(1, "2024-01-01")]) == []


class TestGrouping:
    def test_months_are_ordered_by_period(self):
        events = [
            event(1, "2024-02-10"),
            event(2, "2023-12-31"),
            event(3, "2024-01-15"),
            event(4, "2024-02-01"),
        ]
        rows = reports.events_by_month(events)
        assert [(r["period"], r["count"]) for r in rows] == [("2023-12", 1), ("2024-01", 1), ("2024-02", 2)]
        assert [e["id"] for e in rows[2]["events"]] == [1, 4]

    def test_days_of_week_are_alphabetical(self):
        events = [
            event(1, "2024-01-01"),  # Monday
            event(2, "2024-01-07"),  # Sunday
            event(3, "2024-01-05"),  # Friday
            event(4, "2024-01-08"),  # Monday
            event(5, "2024-01-03"),  # Wednesday
        ]
        assert reports.events_by_day_of_week(events) == [
            {"day_of_week": "Friday", "count": 1},
            {"day_of_week": "Monday", "count": 2},
            {"day_of_week": "Sunday", "count": 1},
            {"day_of_week": "Wednesday", "count": 1},
        ]

    def test_period_report_summary(self):
        report = reports.period_report([], date(2024, 1, 1), date(2024, 1, 31))
        assert report["summary"] == {"total_events": 0, "start_date": "2024-01-01", "end_date": "2024-01-31"}
        assert report["events_by_month"] == []
        assert report["events_by_type"] == []
        assert report["events_by_day_of_week"] == []


class TestClientProductivity:
    def test_single_event_average_is_one(self):
        rows = reports.client_productivity([event(1, "2024-06-01", client="Solo")])
        assert rows[0]["average_events_per_month"] == 1.0
        assert rows[0]["first_event"] == rows[0]["last_event"] == date(2024, 6, 1)

    def test_average_over_span_and_ordering(self):
        events = [
            event(1, "2024-01-01", client="Wide", type="Call"),
            event(2, "2024-02-01", client="Wide", type="Call"),
            event(3, "2024-03-01", client="Wide", type="Meeting"),
            event(4, "2024-03-31", client="Wide"),
            event(5, "2024-01-10", client="Narrow"),
            event(6, "2024-01-20", client="Narrow"),
            event(7, "2024-01-20", client=None),
            event(8, "2024-01-20", client=""),
        ]
        rows = reports.client_productivity(events)
        assert [r["client"] for r in rows] == ["Wide", "Narrow"]

        wide, narrow = rows
        # 90 days span -> 3 months
        assert wide["average_events_per_month"] == 1.33
        assert wide["event_types"] == [{"type": "Call", "count": 2}, {"type": "Meeting", "count": 1}]
        # 10 days span is floored to one month
        assert narrow["average_events_per_month"] == 2.0
        assert narrow["event_types"] == []


class TestTemporalTrends:
    def test_percentages_use_whole_event_set(self):
        events = [
            event(1, "2024-01-01", at="09:00", reminder=10),
            event(2, "2024-01-02", at="09:45", reminder=30),
            event(3, "2024-02-01", at="18:00", reminder=10, type="Call"),
            event(4, "2024-02-02", at="18:30"),
        ]
        trends = reports.temporal_trends(events, months=12)

        assert trends["monthly_trend"] == [
            {"year": 2024, "month": 1, "count": 2, "types": []},
            {"year": 2024, "month": 2, "count": 2, "types": [{"type": "Call", "count": 1}]},
        ]
        assert trends["time_analysis"] == [
            {"hour": 9, "count": 2, "percentage": 50.0},
            {"hour": 18, "count": 2, "percentage": 50.0},
        ]
        assert trends["reminder_analysis"] == [
            {"reminder_minutes": 10, "count": 2, "percentage": 50.0},
            {"reminder_minutes": 30, "count": 1, "percentage": 25.0},
        ]
        assert trends["summary"] == {
            "total_events": 4,
            "average_events_per_month": 0.33,
            "most_active_month": 1,
            "most_active_hour": 9,
        }

    @pytest.mark.parametrize(
        "day, months, expected",
        [
            (date(2024, 3, 31), 1, date(2024, 2, 29)),
            (date(2024, 1, 15), 1, date(2023, 12, 15)),
            (date(2024, 1, 15), 12, date(2023, 1, 15)),
            (date(2024, 5, 31), 3, date(2024, 2, 29)),
        ],
    )
    def test_months_before(self, day, months, expected):
        assert reports.months_before(day, months) == expected


class TestStatistics:
    def test_no_events_gives_zero_counters(self):
        assert reports.statistics([], date(2024, 5, 15)) == {
            "total": 0,
            "this_month": 0,
            "this_week": 0,
            "upcoming": 0,
        }

    def test_counters(self):
        today = date(2024, 5, 15)  # Wednesday; week runs Sunday 12th to Saturday 18th
        events = [
            event(1, "2024-05-12", type="Meeting"),
            event(2, "2024-05-18", type="Meeting"),
            event(3, "2024-05-19", type="Call"),
            event(4, "2024-04-30"),
            event(5, "2024-06-01", type=""),
            event(6, "2023-05-20"),
        ]
        stats = reports.statistics(events, today)
        assert stats == {
            "total": 6,
            "this_month": 3,
            "this_week": 2,
            "upcoming": 3,
            "type_Meeting": 2,
            "type_Call": 1,
        }

    def test_week_starts_on_sunday(self):
        assert reports.week_bounds(date(2024, 5, 12)) == (date(2024, 5, 12), date(2024, 5, 19))
        assert reports.week_bounds(date(2024, 5, 18)) == (date(2024, 5, 12), date(2024, 5, 19))
