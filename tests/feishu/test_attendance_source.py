from datetime import date

import pytest
import requests

from src.attendance_report.attendance_report.core.exceptions import UpstreamError
from src.attendance_report.attendance_report.feishu.attendance_source import StatsAttendanceSource, TaskAttendanceSource

START = date(2025, 3, 10)
END = date(2025, 3, 16)


def test_stats_request_body(http, session):
    session.queue({"code": 0, "data": {"user_datas": [{"user_id": "u1"}]}})
    source = StatsAttendanceSource(http, query_user_id="admin")

    data = source.fetch_raw_records(START, END, ["u1", "u2"], token="t-1")

    assert data == {"user_datas": [{"user_id": "u1"}]}
    call = session.calls[0]
    assert call["url"].endswith("/attendance/v1/user_stats_datas/query")
    assert call["params"] == {"employee_type": "employee_id"}
    assert call["headers"]["Authorization"] == "Bearer t-1"
    assert call["json"] == {
        "current_group_only": True,
        "end_date": 20250316,
        "locale": "zh",
        "need_history": True,
        "start_date": 20250310,
        "stats_type": "month",
        "user_ids": ["u1", "u2"],
        "user_id": "admin",
    }


def test_task_request_body(http, session):
    session.queue({"code": 0, "data": {"user_task_results": []}})

    TaskAttendanceSource(http).fetch_raw_records(START, END, ["u1"], token="t-1")

    assert session.calls[0]["json"] == {"user_ids": ["u1"], "check_date_from": 20250310, "check_date_to": 20250316}


def test_batches_are_sequential_and_merged(http, session):
    session.queue(
        {"code": 0, "data": {"user_datas": [{"user_id": "u1"}, {"user_id": "u2"}]}},
        {"code": 0, "data": {"user_datas": [{"user_id": "u3"}]}},
    )
    pauses = []
    source = StatsAttendanceSource(http, batch_size=2, batch_delay=0.5, sleep=pauses.append)

    data = source.fetch_raw_records(START, END, ["u1", "u2", "u3"], token="t-1")

    assert [e["user_id"] for e in data["user_datas"]] == ["u1", "u2", "u3"]
    assert [c["json"]["user_ids"] for c in session.calls] == [["u1", "u2"], ["u3"]]
    assert pauses == [0.5]


def test_business_error_raises_upstream_error(http, session):
    session.queue({"code": 99991663, "msg": "too many requests"})

    with pytest.raises(UpstreamError) as exc_info:
        StatsAttendanceSource(http).fetch_raw_records(START, END, ["u1"], token="t-1")

    assert exc_info.value.code == 99991663
    assert exc_info.value.message == "too many requests"


def test_transport_error_raises_upstream_error(http, session):
    session.queue(requests.Timeout("read timed out"))

    with pytest.raises(UpstreamError) as exc_info:
        StatsAttendanceSource(http).fetch_raw_records(START, END, ["u1"], token="t-1")

    assert exc_info.value.code is None


def test_missing_data_is_empty(http, session):
    session.queue({"code": 0})

    assert StatsAttendanceSource(http).fetch_raw_records(START, END, ["u1"], token="t-1") == {}
