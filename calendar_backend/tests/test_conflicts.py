from datetime import date, datetime, time, timedelta, timezone

from src.api.conflicts import conflict_report, find_conflicts

_TS = datetime(2024, 1, 1, tzinfo=timezone.utc)


def event(id, at, title=None):
    return {
        "id": id,
        "title": title or f"Event {id}",
        "date": date(2024, 5, 1),
        "time": time.fromisoformat(at),
        "client": None,
        "type": None,
        "reminder_minutes": None,
        "notes": None,
        "email": "owner@example.com",
        "created_at": _TS,
        "updated_at": _TS,
    }


class TestFindConflicts:
    def test_half_hour_overlap(self):
        conflicts = find_conflicts([event(1, "09:00"), event(2, "09:30")])
        assert len(conflicts) == 1
        assert conflicts[0]["overlap_minutes"] == 30
        assert conflicts[0]["event1"] == {"id": 1, "title": "Event 1", "time": time(9, 0)}
        assert conflicts[0]["event2"]["id"] == 2

    def test_boundary_equal_is_not_a_conflict(self):
        assert find_conflicts([event(1, "09:00"), event(2, "10:00")]) == []

    def test_input_order_does_not_matter(self):
        conflicts = find_conflicts([event(2, "09:45"), event(1, "09:00")])
        assert [(c["event1"]["id"], c["event2"]["id"]) for c in conflicts] == [(1, 2)]
        assert conflicts[0]["overlap_minutes"] == 15

    def test_only_adjacent_pairs_are_compared(self):
        # 09:00 also overlaps 09:50 but the two are not neighbours
        conflicts = find_conflicts([event(1, "09:00"), event(2, "09:10"), event(3, "09:50")])
        assert [(c["event1"]["id"], c["event2"]["id"], c["overlap_minutes"]) for c in conflicts] == [
            (1, 2, 50),
            (2, 3, 20),
        ]

    def test_same_start_time_overlaps_fully(self):
        conflicts = find_conflicts([event(1, "13:00"), event(2, "13:00")])
        assert conflicts[0]["overlap_minutes"] == 60

    def test_custom_duration(self):
        assert find_conflicts([event(1, "09:00"), event(2, "09:30")], duration=timedelta(minutes=30)) == []

    def test_single_or_no_event(self):
        assert find_conflicts([]) == []
        assert find_conflicts([event(1, "09:00")]) == []


class TestConflictReport:
    def test_report_shape(self):
        report = conflict_report([event(1, "09:00"), event(2, "09:30")], date(2024, 5, 1))
        assert report["date"] == "2024-05-01"
        assert report["total_events"] == 2
        assert report["has_conflicts"] is True
        assert len(report["conflicts"]) == 1

    def test_no_events(self):
        report = conflict_report([], date(2024, 5, 1))
        assert report == {"date": "2024-05-01", "total_events": 0, "conflicts": [], "has_conflicts": False}
