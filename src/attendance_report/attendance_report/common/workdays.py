from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from .datetime_utils import daterange, parse_iso_date


def _parse_dates(values: Iterable[str | date]) -> frozenset[date]:
    out = set()
    for v in values:
        if isinstance(v, date):
            out.add(v)
            continue
        v = (v or "").strip()
        if v:
            out.add(parse_iso_date(v))
    return frozenset(out)


@dataclass(frozen=True)
class WorkdayCalendar:
    """Holiday / make-up workday rules.

    A date listed in `extra_workdays` is always a workday. Otherwise weekends
    and holidays are off. With `include_weekends`, weekends count unless they
    are holidays.
    """

    holidays: frozenset[date] = field(default_factory=frozenset)
    extra_workdays: frozenset[date] = field(default_factory=frozenset)
    include_weekends: bool = False

    @classmethod
    def from_strings(
        cls,
        *,
        holidays: Iterable[str | date] = (),
        extra_workdays: Iterable[str | date] = (),
        include_weekends: bool = False,
    ) -> "WorkdayCalendar":
        return cls(
            holidays=_parse_dates(holidays),
            extra_workdays=_parse_dates(extra_workdays),
            include_weekends=bool(include_weekends),
        )

    def is_holiday(self, day: date) -> bool:
        return day in self.holidays

    def is_workday(self, day: date) -> bool:
        if day in self.extra_workdays:
            return True
        if self.is_holiday(day):
            return False
        if day.weekday() >= 5:
            return self.include_weekends
        return True

    def workdays_between(self, start: date, end: date) -> list[date]:
        return [d for d in daterange(start, end) if self.is_workday(d)]
