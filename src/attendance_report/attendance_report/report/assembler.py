from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Sequence

from ..attendance.model import CheckInRecord, DepartmentStats
from ..attendance.ranking import RankingViews
from ..common.datetime_utils import month_to_date, parse_iso_date
from ..common.workdays import WorkdayCalendar
from ..core.constants import DEFAULT_FIXED_TOTAL_DAYS, DEFAULT_REPORT_TITLE, NO_DATA_MESSAGE
from ..core.enums import TotalDaysMode
from .model import AttendanceReport, ReportPeriod, ReportSummary

NO_DEPARTMENT_MESSAGE = "no department statistics"


def as_period(value) -> Optional[ReportPeriod]:
    """Accept ReportPeriod, (start, end) of dates/strings, or None."""
    if value is None or isinstance(value, ReportPeriod):
        return value
    start, end = value
    return ReportPeriod(start=_iso(start), end=_iso(end))


def _iso(value) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


class ReportAssembler:
    def __init__(
        self,
        *,
        total_days_mode: TotalDaysMode = TotalDaysMode.DISTINCT_DATES,
        fixed_total_days: int = DEFAULT_FIXED_TOTAL_DAYS,
        calendar: Optional[WorkdayCalendar] = None,
        title: str = DEFAULT_REPORT_TITLE,
    ):
        self._mode = TotalDaysMode(total_days_mode)
        self._fixed_total_days = int(fixed_total_days)
        self._calendar = calendar or WorkdayCalendar()
        self._title = title

    def assemble(
        self,
        department_stats: Mapping[str, DepartmentStats],
        ranking_data: Sequence[CheckInRecord],
        period=None,
        *,
        rankings: Optional[RankingViews] = None,
        fallback_period=None,
        title: Optional[str] = None,
        today: Optional[date] = None,
    ) -> AttendanceReport:
        records = list(ranking_data or [])
        stats = dict(department_stats or {})

        total_on_time = total_late = in_morning = 0
        dates: set[str] = set()
        for r in records:
            if r.is_late:
                total_late += 1
            else:
                total_on_time += 1
            if r.is_in_morning_range:
                in_morning += 1
            dates.add(r.date)

        resolved = self._resolve_period(dates, period, fallback_period, today)
        summary = ReportSummary(
            total_days=self._total_days(dates, resolved),
            total_records=len(records),
            total_on_time=total_on_time,
            total_late=total_late,
            total_in_morning_range=in_morning,
        )

        message = None
        if not records:
            message = NO_DATA_MESSAGE
        elif not stats:
            message = NO_DEPARTMENT_MESSAGE

        return AttendanceReport(
            title=title or self._title,
            period=resolved,
            department_stats=stats,
            ranking_data=records,
            summary=summary,
            rankings=rankings,
            message=message,
        )

    def placeholder(self, message: str, *, title: Optional[str] = None, period=None, today: Optional[date] = None) -> AttendanceReport:
        """Empty-but-valid report for failed or degraded runs."""
        resolved = as_period(period) or self._month_to_date(today)
        return AttendanceReport(title=title or self._title, period=resolved, message=message)

    def _resolve_period(self, dates: set[str], period, fallback_period, today: Optional[date]) -> ReportPeriod:
        explicit = as_period(period)
        if explicit is not None:
            return explicit
        if dates:
            return ReportPeriod(start=min(dates), end=max(dates))
        return as_period(fallback_period) or self._month_to_date(today)

    @staticmethod
    def _month_to_date(today: Optional[date]) -> ReportPeriod:
        start, end = month_to_date(today or date.today())
        return ReportPeriod(start=start.isoformat(), end=end.isoformat())

    def _total_days(self, dates: set[str], period: ReportPeriod) -> int:
        if self._mode == TotalDaysMode.FIXED:
            return self._fixed_total_days
        if self._mode == TotalDaysMode.WORKDAY_CALENDAR:
            return len(self._calendar.workdays_between(parse_iso_date(period.start), parse_iso_date(period.end)))
        return len(dates)
