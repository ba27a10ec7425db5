from __future__ import annotations

from datetime import date

from ..attendance.model import UserRanking
from ..common.datetime_utils import parse_iso_date
from .model import AttendanceReport

_WEEKDAY_LABEL = {
    0: "Mon",
    1: "Tue",
    2: "Wed",
    3: "Thu",
    4: "Fri",
    5: "Sat",
    6: "Sun",
}


def _date_label(value: str) -> str:
    try:
        d: date = parse_iso_date(value)
    except ValueError:
        return value
    return f"{value}({_WEEKDAY_LABEL[d.weekday()]})"


def _ranking_lines(users, *, start: int = 1) -> list[str]:
    return [
        f"{i}. {u.user_name} - {u.avg_check_in_time} ({u.department}, {u.check_in_count} days)"
        for i, u in enumerate(users, start=start)
    ]


class TextReportRenderer:
    """Plain-text rendering, platform neutral."""

    def __init__(self, *, title: str | None = None):
        self._title = title

    def render(self, report: AttendanceReport) -> str:
        lines = [f"📊 {self._title or report.title}", f"Period: {report.period.start} to {report.period.end}", ""]

        if report.message:
            lines.append(f"ℹ️ {report.message}")
            lines.append("")

        if report.department_stats:
            lines.append("🏢 Departments:")
            for dept in sorted(report.department_stats.values(), key=lambda d: d.department_name):
                lines.append(f"{dept.department_name}: on time {dept.total_on_time_count}, late {dept.total_late_count}")
            lines.append("")

        views = report.rankings
        if views is not None and views.ranked:
            lines.append("🌅 Early birds:")
            lines.extend(_ranking_lines(views.top))
            if not views.single_list and views.bottom:
                lines.append("")
                lines.append("🐢 Latest arrivals:")
                first_rank = len(views.ranked) - len(views.bottom) + 1
                lines.extend(_ranking_lines(views.bottom, start=first_rank))
            lines.append("")

            late_users: tuple[UserRanking, ...] = views.late_users
            if late_users:
                lines.append("⏰ Late list:")
                for i, u in enumerate(late_users, start=1):
                    dates = ", ".join(_date_label(d) for d in u.late_dates)
                    lines.append(f"{i}. {u.user_name} ({u.department}) x{u.late_count}: {dates}")
                lines.append("")
        elif report.has_data:
            lines.append("🌅 No check-ins inside the morning window")
            lines.append("")

        s = report.summary
        lines.append(
            f"Records {s.total_records} | on time {s.total_on_time} | late {s.total_late} | "
            f"morning window {s.total_in_morning_range} | days {s.total_days}"
        )
        lines.append(f"Generated at: {report.generated_at.strftime('%Y-%m-%d %H:%M:%S')}")
        return "\n".join(lines)
