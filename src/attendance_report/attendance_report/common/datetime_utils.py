from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

from ..core.constants import MILLISECONDS_THRESHOLD
from ..core.exceptions import MalformedRecordError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_compact_date(value: Any) -> date:
    """Parse a YYYYMMDD int/str (upstream `day` field) into date."""
    try:
        return datetime.strptime(str(int(value)), "%Y%m%d").date()
    except (TypeError, ValueError) as exc:
        raise MalformedRecordError(f"invalid day value: {value!r}") from exc


def to_compact_int(value: date) -> int:
    return int(value.strftime("%Y%m%d"))


def to_unix_seconds(value: Any) -> float:
    """Normalize an upstream timestamp to unix seconds.

    Upstream sends either seconds or milliseconds, as int or str. A value above
    MILLISECONDS_THRESHOLD is taken as milliseconds.
    """
    if isinstance(value, bool):
        raise MalformedRecordError(f"invalid timestamp: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedRecordError(f"invalid timestamp: {value!r}") from exc
    if not math.isfinite(number) or number < 0:
        raise MalformedRecordError(f"invalid timestamp: {value!r}")

    if number > MILLISECONDS_THRESHOLD:
        number = number / 1000
    return number


def from_unix(value: Any, tz_name: str) -> datetime:
    seconds = to_unix_seconds(value)
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc).astimezone(ZoneInfo(tz_name))
    except (OverflowError, OSError, ValueError) as exc:
        raise MalformedRecordError(f"timestamp out of range: {value!r}") from exc


def clock_to_minutes(value: str) -> int:
    """'HH:MM' or 'HH:MM:SS' -> minutes since midnight (seconds ignored)."""
    parts = (value or "").split(":")
    if len(parts) < 2:
        raise MalformedRecordError(f"invalid clock time: {value!r}")
    try:
        hours, minutes = int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise MalformedRecordError(f"invalid clock time: {value!r}") from exc
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise MalformedRecordError(f"invalid clock time: {value!r}")
    return hours * 60 + minutes


def minutes_to_clock(total_minutes: float) -> str:
    """Minutes -> 'HH:MM', truncating (floor) both parts."""
    hours = math.floor(total_minutes / 60)
    minutes = math.floor(total_minutes % 60)
    return f"{hours:02d}:{minutes:02d}"


def previous_iso_week(today: date) -> tuple[date, date]:
    """Monday..Sunday of the week before `today`."""
    this_monday = today - timedelta(days=today.weekday())
    start = this_monday - timedelta(days=7)
    return start, start + timedelta(days=6)


def last_n_days(today: date, days: int) -> tuple[date, date]:
    """`days` full days ending yesterday."""
    end = today - timedelta(days=1)
    return end - timedelta(days=days - 1), end


def month_to_date(today: date) -> tuple[date, date]:
    return today.replace(day=1), today


def daterange(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
