from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..common.datetime_utils import clock_to_minutes
from ..core.enums import CheckInStatus, SkipReason, SourceKind
from .morning_window import DEFAULT_MORNING_WINDOW, MorningWindow


@dataclass(frozen=True)
class CheckInRecord:
    """Thực thể miền (domain): một lần chấm công vào, đã chuẩn hoá."""

    date: str
    check_in_time: str
    user_id: str
    user_name: str
    department: str
    status: CheckInStatus
    is_late: bool
    is_in_morning_range: bool
    total_minutes: int
    check_in_type: Optional[str] = None
    source: Optional[SourceKind] = None

    @classmethod
    def create(
        cls,
        *,
        date: str,
        check_in_time: str,
        user_id: str,
        user_name: str,
        department: str,
        status: CheckInStatus,
        is_late: bool,
        check_in_type: Optional[str] = None,
        source: Optional[SourceKind] = None,
        window: MorningWindow = DEFAULT_MORNING_WINDOW,
    ) -> "CheckInRecord":
        """Build a record; derived minute fields always come from check_in_time."""
        total_minutes = clock_to_minutes(check_in_time)
        return cls(
            date=date,
            check_in_time=check_in_time,
            user_id=user_id,
            user_name=user_name,
            department=department,
            status=status,
            is_late=bool(is_late),
            is_in_morning_range=window.classify(total_minutes).in_morning_range,
            total_minutes=total_minutes,
            check_in_type=check_in_type,
            source=source,
        )

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "checkInTime": self.check_in_time,
            "userId": self.user_id,
            "userName": self.user_name,
            "department": self.department,
            "status": self.status.value,
            "isLate": self.is_late,
            "isInMorningRange": self.is_in_morning_range,
            "totalMinutes": self.total_minutes,
        }


@dataclass
class UserStats:
    user_id: str
    user_name: str
    on_time_count: int = 0
    late_count: int = 0

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "userName": self.user_name,
            "onTimeCount": self.on_time_count,
            "lateCount": self.late_count,
        }


@dataclass
class DepartmentStats:
    """Department rollup: on-time/late counters plus per-user counters."""

    department_name: str
    total_on_time_count: int = 0
    total_late_count: int = 0
    users: dict[str, UserStats] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "departmentName": self.department_name,
            "totalOnTimeCount": self.total_on_time_count,
            "totalLateCount": self.total_late_count,
            "users": {uid: u.to_dict() for uid, u in self.users.items()},
        }


@dataclass(frozen=True)
class UserRanking:
    """Read-model cho bảng xếp hạng (không lưu trữ)."""

    user_id: str
    user_name: str
    department: str
    avg_check_in_time: str
    check_in_count: int
    late_count: int
    late_dates: tuple[str, ...]
    total_minutes: float

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "userName": self.user_name,
            "department": self.department,
            "avgCheckInTime": self.avg_check_in_time,
            "checkInCount": self.check_in_count,
            "lateCount": self.late_count,
            "lateDates": list(self.late_dates),
            "totalMinutes": self.total_minutes,
        }


@dataclass(frozen=True)
class SkippedEntry:
    user_id: Optional[str]
    date: Optional[str]
    reason: SkipReason
    detail: str = ""


@dataclass
class NormalizationResult:
    records: list[CheckInRecord] = field(default_factory=list)
    skipped: list[SkippedEntry] = field(default_factory=list)

    def extend(self, other: "NormalizationResult") -> None:
        self.records.extend(other.records)
        self.skipped.extend(other.skipped)
