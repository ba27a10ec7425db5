from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..attendance.model import CheckInRecord, DepartmentStats
from ..attendance.ranking import RankingViews


@dataclass(frozen=True)
class ReportPeriod:
    start: str
    end: str

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class ReportSummary:
    total_days: int = 0
    total_records: int = 0
    total_on_time: int = 0
    total_late: int = 0
    total_in_morning_range: int = 0

    def to_dict(self) -> dict:
        return {
            "totalDays": self.total_days,
            "totalRecords": self.total_records,
            "totalOnTime": self.total_on_time,
            "totalLate": self.total_late,
            "totalInMorningRange": self.total_in_morning_range,
        }


@dataclass
class AttendanceReport:
    """Final artifact handed to renderers and sinks.

    Always fully shaped: degraded runs keep empty stats/records and explain
    themselves in `message`.
    """

    title: str
    period: ReportPeriod
    department_stats: dict[str, DepartmentStats] = field(default_factory=dict)
    ranking_data: list[CheckInRecord] = field(default_factory=list)
    summary: ReportSummary = field(default_factory=ReportSummary)
    rankings: Optional[RankingViews] = None
    message: Optional[str] = None
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def has_data(self) -> bool:
        return bool(self.ranking_data)

    def to_dict(self) -> dict:
        out = {
            "title": self.title,
            "period": self.period.to_dict(),
            "departmentStats": {k: v.to_dict() for k, v in self.department_stats.items()},
            "rankingData": [r.to_dict() for r in self.ranking_data],
            "summary": self.summary.to_dict(),
            "generatedAt": self.generated_at.strftime("%Y-%m-%d %H:%M:%S"),
        }
        if self.rankings is not None:
            out["rankings"] = self.rankings.to_dict()
        if self.message is not None:
            out["message"] = self.message
        return out
