from __future__ import annotations

from enum import Enum


class CheckInStatus(str, Enum):
    """Phân loại chấm công do hệ thống nguồn báo về (upstream)."""

    NORMAL = "Normal"
    LATE = "Late"
    ABNORMAL = "Abnormal"
    UNKNOWN = "Unknown"


class SourceKind(str, Enum):
    """Which upstream endpoint shape a payload came from."""

    STATS = "stats"
    TASK = "task"


class LatenessMode(str, Enum):
    """Two genuinely different lateness definitions; never merged."""

    UPSTREAM_FLAG = "upstream_flag"
    THRESHOLD = "threshold"


class LatePunchScope(str, Enum):
    ON_DUTY_ONLY = "on_duty_only"
    ANY_PUNCH = "any_punch"


class TotalDaysMode(str, Enum):
    DISTINCT_DATES = "distinct_dates"
    FIXED = "fixed"
    WORKDAY_CALENDAR = "workday_calendar"


class SkipReason(str, Enum):
    """Named outcomes for every payload entry that yields no record."""

    MISSING_DATAS = "MISSING_DATAS"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    NO_LEADING_TIME = "NO_LEADING_TIME"
    MISSING_RECORDS = "MISSING_RECORDS"
    MISSING_CHECK_IN_RECORD = "MISSING_CHECK_IN_RECORD"
    UNPARSEABLE_TIMESTAMP = "UNPARSEABLE_TIMESTAMP"
    MALFORMED = "MALFORMED"
