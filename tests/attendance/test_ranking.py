from __future__ import annotations

from datetime import date

import pytest

from src.attendance_report.attendance_report.attendance.morning_window import MorningWindow
from src.attendance_report.attendance_report.attendance.ranking import RankingEngine, bottom_n, late_ranking, top_n
from src.attendance_report.attendance_report.attendance.strategies.upstream_flag_strategy import UpstreamFlagStrategy
from src.attendance_report.attendance_report.common.workdays import WorkdayCalendar
from src.attendance_report.attendance_report.core.exceptions import ValidationError


def _population(record_factory, count):
    # u0 earliest, each next user one minute later
    return [record_factory(f"u{i}", "2025-03-10", f"07:{10 + i:02d}:00") for i in range(count)]


def test_first_punch_of_the_day_wins(record_factory):
    records = [
        record_factory("u1", "2025-03-10", "07:50:00"),
        record_factory("u1", "2025-03-10", "08:10:00"),
    ]

    [ranking] = RankingEngine().rank(records)

    assert ranking.check_in_count == 1
    assert ranking.avg_check_in_time == "07:50"
    assert ranking.late_count == 0


def test_out_of_window_punch_excluded(record_factory):
    records = [
        record_factory("u1", "2025-03-10", "09:15:00"),
        record_factory("u1", "2025-03-11", "07:30:00"),
        record_factory("u2", "2025-03-10", "06:29:00"),
    ]

    rankings = RankingEngine().rank(records)

    assert [r.user_id for r in rankings] == ["u1"]
    assert rankings[0].check_in_count == 1


def test_window_bounds_are_inclusive(record_factory):
    records = [record_factory("u1", "2025-03-10", "06:30:00"), record_factory("u2", "2025-03-10", "08:30:00")]

    assert [r.user_id for r in RankingEngine().rank(records)] == ["u1", "u2"]


def test_sorted_ascending_by_average(record_factory):
    records = [
        record_factory("late", "2025-03-10", "07:30:00"),  # 450
        record_factory("early", "2025-03-10", "06:50:00"),  # 410
    ]

    assert [r.user_id for r in RankingEngine().rank(records)] == ["early", "late"]


def test_average_is_floored(record_factory):
    records = [
        record_factory("u1", "2025-03-10", "07:00:00"),
        record_factory("u1", "2025-03-11", "07:01:00"),
    ]

    [ranking] = RankingEngine().rank(records)

    assert ranking.total_minutes == 420.5
    assert ranking.avg_check_in_time == "07:00"


def test_ties_keep_first_seen_order(record_factory):
    records = [
        record_factory("b", "2025-03-10", "07:30:00"),
        record_factory("a", "2025-03-10", "07:30:00"),
    ]

    assert [r.user_id for r in RankingEngine().rank(records)] == ["b", "a"]


def test_late_count_is_threshold_based(record_factory):
    records = [
        record_factory("u1", "2025-03-10", "08:00:00"),
        record_factory("u1", "2025-03-11", "08:01:00"),
        record_factory("u1", "2025-03-12", "08:25:00", check_in_type="OffDuty"),
    ]

    [ranking] = RankingEngine().rank(records)

    assert ranking.late_count == 1
    assert ranking.late_dates == ("2025-03-11",)


def test_upstream_flag_mode_counts_record_flags(record_factory):
    records = [
        record_factory("u1", "2025-03-10", "08:15:00", is_late=False),
        record_factory("u1", "2025-03-11", "07:40:00", is_late=True),
    ]

    [ranking] = RankingEngine(late_strategy=UpstreamFlagStrategy()).rank(records)

    assert ranking.late_dates == ("2025-03-11",)


def test_custom_window(record_factory):
    engine = RankingEngine(window=MorningWindow(7 * 60, 9 * 60))
    records = [record_factory("u1", "2025-03-10", "06:45:00"), record_factory("u2", "2025-03-10", "08:50:00")]

    assert [r.user_id for r in engine.rank(records)] == ["u2"]


def test_window_filter_overrides_window(record_factory):
    records = [record_factory("u1", "2025-03-10", "10:00:00")]

    rankings = RankingEngine().rank(records, window_filter=lambda r: True)

    assert rankings[0].avg_check_in_time == "10:00"


def test_calendar_drops_non_workdays(record_factory):
    calendar = WorkdayCalendar.from_strings(holidays=["2025-03-11"])
    records = [
        record_factory("u1", "2025-03-10", "07:30:00"),
        record_factory("u1", "2025-03-11", "07:00:00"),
        record_factory("u1", "2025-03-15", "07:00:00"),  # Saturday
    ]

    [ranking] = RankingEngine(calendar=calendar).rank(records)

    assert ranking.check_in_count == 1
    assert ranking.avg_check_in_time == "07:30"


def test_empty_input():
    assert RankingEngine().rank([]) == []


def test_views_small_population_is_single_list(record_factory):
    engine = RankingEngine(limit=5)
    rankings = engine.rank(_population(record_factory, 3))

    views = engine.views(rankings)

    assert views.single_list is True
    assert views.top == views.bottom == tuple(rankings)


def test_views_top_and_bottom_do_not_overlap(record_factory):
    engine = RankingEngine(limit=5)
    rankings = engine.rank(_population(record_factory, 7))

    views = engine.views(rankings)

    assert [u.user_id for u in views.top] == ["u0", "u1", "u2", "u3", "u4"]
    assert [u.user_id for u in views.bottom] == ["u5", "u6"]
    assert views.single_list is False


def test_views_large_population(record_factory):
    engine = RankingEngine(limit=5)
    rankings = engine.rank(_population(record_factory, 12))

    views = engine.views(rankings)

    assert [u.user_id for u in views.bottom] == ["u7", "u8", "u9", "u10", "u11"]
    assert len(views.top) == 5


@pytest.mark.parametrize("size", [10, 11])
def test_bottom_n_at_twice_limit(record_factory, size):
    rankings = RankingEngine().rank(_population(record_factory, size))

    bottom = bottom_n(rankings, 5)

    assert len(bottom) == 5
    assert not set(u.user_id for u in bottom) & set(u.user_id for u in top_n(rankings, 5))


def test_late_ranking_descending_and_stable(record_factory):
    records = [
        record_factory("a", "2025-03-10", "08:05:00"),
        record_factory("b", "2025-03-10", "07:00:00"),
        record_factory("b", "2025-03-11", "08:10:00"),
        record_factory("b", "2025-03-12", "08:20:00"),
        record_factory("c", "2025-03-10", "08:02:00"),
    ]
    rankings = RankingEngine().rank(records)

    late = late_ranking(rankings)

    assert [(u.user_id, u.late_count) for u in late] == [("b", 2), ("c", 1), ("a", 1)]
    assert RankingEngine().views(rankings).late_users == tuple(late)


def test_views_to_dict(record_factory):
    engine = RankingEngine(limit=2)
    out = engine.views(engine.rank(_population(record_factory, 3))).to_dict()

    assert out["limit"] == 2
    assert out["singleList"] is False
    assert [u["userId"] for u in out["top"]] == ["u0", "u1"]
    assert [u["userId"] for u in out["bottom"]] == ["u2"]


def test_invalid_window_rejected():
    with pytest.raises(ValidationError):
        MorningWindow(500, 400)


def test_calendar_workdays_between():
    calendar = WorkdayCalendar.from_strings(holidays=["2025-03-11"], extra_workdays=["2025-03-15"])

    days = calendar.workdays_between(date(2025, 3, 10), date(2025, 3, 16))

    assert [d.day for d in days] == [10, 12, 13, 14, 15]
