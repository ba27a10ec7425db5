from __future__ import annotations

from datetime import date

import pytest

from src.attendance_report.attendance_report.attendance.model import CheckInRecord
from src.attendance_report.attendance_report.core.enums import CheckInStatus


@pytest.fixture
def fixed_today() -> date:
    # Monday; the previous ISO week is 2025-03-10 .. 2025-03-16
    return date(2025, 3, 17)


def make_record(
    user_id: str = "u1",
    day: str = "2025-03-10",
    clock: str = "07:50:00",
    *,
    user_name: str | None = None,
    department: str = "R&D",
    is_late: bool = False,
    status: CheckInStatus = CheckInStatus.NORMAL,
    check_in_type: str | None = None,
) -> CheckInRecord:
    return CheckInRecord.create(
        date=day,
        check_in_time=clock,
        user_id=user_id,
        user_name=user_name or user_id.upper(),
        department=department,
        status=status,
        is_late=is_late,
        check_in_type=check_in_type,
    )


def stats_user(user_id: str, name: str, days: dict[str, str], *, department: str | None = "R&D", abnormal: set[str] = frozenset()) -> dict:
    """Build one `user_datas` entry; `days` maps YYYY-MM-DD -> punch string."""
    datas = []
    if department is not None:
        datas.append({"code": "50102", "title": "部门", "value": department, "features": []})
    for day, value in days.items():
        datas.append(
            {
                "code": day,
                "title": f"{day} 星期一",
                "value": value,
                "features": [{"key": "Abnormal", "value": "true" if day in abnormal else "false"}],
            }
        )
    return {"user_id": user_id, "name": name, "datas": datas}


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def stats_user_factory():
    return stats_user
