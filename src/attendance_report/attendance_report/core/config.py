from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..attendance.morning_window import MorningWindow
from ..common.workdays import WorkdayCalendar
from .constants import (
    DEFAULT_FIXED_TOTAL_DAYS,
    DEFAULT_LATE_THRESHOLD_MINUTES,
    DEFAULT_RANKING_LIMIT,
    DEFAULT_REPORT_TITLE,
    DEFAULT_RESULT_CACHE_TTL_SECONDS,
    DEFAULT_TIMEZONE,
    MORNING_END_MINUTES,
    MORNING_START_MINUTES,
)
from .enums import LatenessMode, LatePunchScope, SourceKind, TotalDaysMode
from .exceptions import ValidationError


def _split_csv(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple, set, frozenset)):
        items = value
    else:
        items = str(value).split(",")
    return tuple(s for s in (str(i).strip() for i in items) if s)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed} (got {value!r})")


@dataclass(frozen=True)
class ReportConfig:
    """Typed configuration recognized by the reporting pipeline."""

    user_ids: tuple[str, ...] = ()
    date_range_days: Optional[int] = None
    morning_window: MorningWindow = field(default_factory=MorningWindow)
    late_threshold_min: int = DEFAULT_LATE_THRESHOLD_MINUTES
    ranking_limit: int = DEFAULT_RANKING_LIMIT
    workday_calendar: Optional[WorkdayCalendar] = None

    source_kind: Optional[SourceKind] = None
    query_user_id: Optional[str] = None
    timezone: str = DEFAULT_TIMEZONE
    title: str = DEFAULT_REPORT_TITLE
    total_days_mode: TotalDaysMode = TotalDaysMode.DISTINCT_DATES
    fixed_total_days: int = DEFAULT_FIXED_TOTAL_DAYS
    late_punch_scope: LatePunchScope = LatePunchScope.ON_DUTY_ONLY
    ranking_lateness_mode: LatenessMode = LatenessMode.THRESHOLD
    result_cache_ttl: int = DEFAULT_RESULT_CACHE_TTL_SECONDS

    def __post_init__(self):
        if self.date_range_days is not None and self.date_range_days < 1:
            raise ValidationError("date_range_days must be >= 1")
        if self.ranking_limit < 1:
            raise ValidationError("ranking_limit must be >= 1")
        if not (0 <= self.late_threshold_min < 24 * 60):
            raise ValidationError("late_threshold_min must be within a day")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValidationError(f"Unknown timezone {self.timezone!r}") from exc

    @classmethod
    def from_settings(cls, settings: Any) -> "ReportConfig":
        """Build from a settings module (config.development, ...) or a dict."""

        def get(name: str, default=None):
            if isinstance(settings, dict):
                return settings.get(name, default)
            return getattr(settings, name, default)

        days = get("DATE_RANGE_DAYS")
        source = get("ATTENDANCE_SOURCE")
        calendar = None
        if get("HOLIDAYS") or get("WORKDAYS") or _as_bool(get("INCLUDE_WEEKENDS", False)) or get("USE_WORKDAY_CALENDAR"):
            calendar = WorkdayCalendar.from_strings(
                holidays=_split_csv(get("HOLIDAYS")),
                extra_workdays=_split_csv(get("WORKDAYS")),
                include_weekends=_as_bool(get("INCLUDE_WEEKENDS", False)),
            )

        try:
            return cls(
                user_ids=_split_csv(get("USER_IDS")),
                date_range_days=int(days) if days not in (None, "") else None,
                morning_window=MorningWindow(
                    int(get("MORNING_START_MIN", MORNING_START_MINUTES)),
                    int(get("MORNING_END_MIN", MORNING_END_MINUTES)),
                ),
                late_threshold_min=int(get("LATE_THRESHOLD_MIN", DEFAULT_LATE_THRESHOLD_MINUTES)),
                ranking_limit=int(get("RANKING_LIMIT", DEFAULT_RANKING_LIMIT)),
                workday_calendar=calendar,
                source_kind=_enum(SourceKind, source, "ATTENDANCE_SOURCE") if source else None,
                query_user_id=get("QUERY_USER_ID") or None,
                timezone=get("TIMEZONE") or DEFAULT_TIMEZONE,
                title=get("MESSAGE_TITLE") or DEFAULT_REPORT_TITLE,
                total_days_mode=_enum(TotalDaysMode, get("TOTAL_DAYS_MODE", TotalDaysMode.DISTINCT_DATES.value), "TOTAL_DAYS_MODE"),
                fixed_total_days=int(get("FIXED_TOTAL_DAYS", DEFAULT_FIXED_TOTAL_DAYS)),
                late_punch_scope=_enum(LatePunchScope, get("LATE_PUNCH_SCOPE", LatePunchScope.ON_DUTY_ONLY.value), "LATE_PUNCH_SCOPE"),
                ranking_lateness_mode=_enum(LatenessMode, get("RANKING_LATENESS_MODE", LatenessMode.THRESHOLD.value), "RANKING_LATENESS_MODE"),
                result_cache_ttl=int(get("RESULT_CACHE_TTL", DEFAULT_RESULT_CACHE_TTL_SECONDS)),
            )
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid report settings: {exc}") from exc
