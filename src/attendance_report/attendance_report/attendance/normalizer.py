"""Raw payload -> CheckInRecord normalizers.

Two upstream endpoints return differently shaped data:

* ``user_stats_datas/query`` (stats): one entry per user, a ``datas`` list with
  one column per day whose value looks like ``"正常(07:50),正常(17:35)"`` and an
  ``Abnormal`` feature flag.
* ``user_tasks/query`` (task): one entry per user per day with a ``records``
  list of punch pairs; the check-in carries a unix timestamp.

Parsing failures are per entry: the entry is dropped with a named
``SkipReason`` and the rest of the batch goes on.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Iterable, Mapping, Optional

from ..common.datetime_utils import from_unix, parse_compact_date, parse_iso_date
from ..core.constants import (
    DEFAULT_TIMEZONE,
    DEPARTMENT_FIELD_CODE,
    UNKNOWN_DEPARTMENT,
    UNKNOWN_USER_NAME,
    WEEKDAY_TITLE_MARKER,
)
from ..core.enums import CheckInStatus, SkipReason, SourceKind
from ..core.exceptions import MalformedRecordError
from .factory import LatenessStrategyFactory
from .model import CheckInRecord, NormalizationResult, SkippedEntry
from .morning_window import DEFAULT_MORNING_WINDOW, MorningWindow
from .strategies.base import LatenessStrategy

logger = logging.getLogger(__name__)

_DAY_CODE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LEADING_TIME = re.compile(r"\((\d{2}:\d{2})\)")

_TASK_RESULT_STATUS = {
    "Normal": CheckInStatus.NORMAL,
    "Late": CheckInStatus.LATE,
}


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


class _Skip(Exception):
    """Internal: an entry produced no record for a named reason."""

    def __init__(self, reason: SkipReason, detail: str = ""):
        super().__init__(detail or reason.value)
        self.reason = reason
        self.detail = detail


class RawRecordNormalizer(ABC):
    source: SourceKind

    def __init__(
        self,
        *,
        strategy: Optional[LatenessStrategy] = None,
        strategy_factory: Optional[LatenessStrategyFactory] = None,
        window: MorningWindow = DEFAULT_MORNING_WINDOW,
    ):
        factory = strategy_factory or LatenessStrategyFactory()
        self._strategy = strategy or factory.for_source(self.source)
        self._window = window

    @property
    def strategy(self) -> LatenessStrategy:
        return self._strategy

    @abstractmethod
    def normalize(self, payload: Mapping[str, Any], date_range: DateRange) -> NormalizationResult:
        """Normalize one user-level (stats) or user-day-level (task) entry."""
        raise NotImplementedError

    def normalize_many(self, payloads: Iterable[Mapping[str, Any]], date_range: DateRange) -> NormalizationResult:
        result = NormalizationResult()
        for payload in payloads or []:
            if not isinstance(payload, Mapping):
                result.skipped.append(SkippedEntry(None, None, SkipReason.MALFORMED, f"not a mapping: {type(payload).__name__}"))
                continue
            result.extend(self.normalize(payload, date_range))
        logger.info(
            "Normalized %s payload: %d records kept, %d entries skipped",
            self.source.value,
            len(result.records),
            len(result.skipped),
        )
        return result

    def _skip(self, result: NormalizationResult, user_id, day, exc: Exception) -> None:
        if isinstance(exc, _Skip):
            entry = SkippedEntry(user_id, day, exc.reason, exc.detail)
            logger.debug("Skip %s/%s: %s %s", user_id, day, exc.reason.value, exc.detail)
        else:
            entry = SkippedEntry(user_id, day, SkipReason.MALFORMED, str(exc))
            logger.warning("Dropping malformed entry for user %s on %s: %s", user_id, day, exc)
        result.skipped.append(entry)


class StatsRecordNormalizer(RawRecordNormalizer):
    """user_stats_datas entries; lateness comes from the upstream Abnormal flag."""

    source = SourceKind.STATS

    def normalize(self, payload: Mapping[str, Any], date_range: DateRange) -> NormalizationResult:
        result = NormalizationResult()
        user_id = str(payload.get("user_id") or "")
        user_name = payload.get("name") or UNKNOWN_USER_NAME

        datas = payload.get("datas")
        if not isinstance(datas, list):
            self._skip(result, user_id, None, _Skip(SkipReason.MISSING_DATAS))
            return result

        department = self.extract_department(datas)

        for item in datas:
            if not self._is_day_column(item):
                continue
            day = item.get("code")
            try:
                record = self._parse_day(item, date_range, user_id=user_id, user_name=user_name, department=department)
            except (_Skip, MalformedRecordError, KeyError, TypeError, ValueError, AttributeError) as exc:
                self._skip(result, user_id, day, exc)
                continue
            result.records.append(record)

        if not result.records:
            logger.debug("User %s(%s) has no usable day entries", user_name, user_id)
        return result

    @staticmethod
    def extract_department(datas: list) -> str:
        for item in datas:
            if isinstance(item, Mapping) and item.get("code") == DEPARTMENT_FIELD_CODE:
                return item.get("value") or UNKNOWN_DEPARTMENT
        return UNKNOWN_DEPARTMENT

    @staticmethod
    def _is_day_column(item: Any) -> bool:
        if not isinstance(item, Mapping):
            return False
        code = item.get("code")
        title = item.get("title") or ""
        return isinstance(code, str) and bool(_DAY_CODE.match(code)) and WEEKDAY_TITLE_MARKER in title

    def _parse_day(self, item: Mapping[str, Any], date_range: DateRange, *, user_id: str, user_name: str, department: str) -> CheckInRecord:
        code = item["code"]
        try:
            day = parse_iso_date(code)
        except ValueError as exc:
            raise MalformedRecordError(f"invalid day code {code!r}") from exc
        if day not in date_range:
            raise _Skip(SkipReason.OUT_OF_RANGE, code)

        value = item.get("value") or ""
        match = _LEADING_TIME.search(str(value).split(",")[0])
        if not match:
            raise _Skip(SkipReason.NO_LEADING_TIME, str(value))
        check_in_time = f"{match.group(1)}:00"

        abnormal = any(
            isinstance(f, Mapping) and f.get("key") == "Abnormal" and str(f.get("value")).lower() == "true"
            for f in item.get("features") or []
        )

        record = CheckInRecord.create(
            date=code,
            check_in_time=check_in_time,
            user_id=user_id,
            user_name=user_name,
            department=department,
            status=CheckInStatus.ABNORMAL if abnormal else CheckInStatus.NORMAL,
            is_late=False,
            source=self.source,
            window=self._window,
        )
        decision = self._strategy.decide(total_minutes=record.total_minutes, upstream_flag=abnormal)
        return _with_late(record, decision.is_late)


class TaskRecordNormalizer(RawRecordNormalizer):
    """user_tasks entries; lateness is recomputed from the check-in clock time."""

    source = SourceKind.TASK

    def __init__(
        self,
        *,
        timezone: str = DEFAULT_TIMEZONE,
        departments: Optional[Mapping[str, str]] = None,
        strategy: Optional[LatenessStrategy] = None,
        strategy_factory: Optional[LatenessStrategyFactory] = None,
        window: MorningWindow = DEFAULT_MORNING_WINDOW,
    ):
        super().__init__(strategy=strategy, strategy_factory=strategy_factory, window=window)
        self._timezone = timezone
        self._departments = dict(departments or {})

    def normalize(self, payload: Mapping[str, Any], date_range: DateRange) -> NormalizationResult:
        result = NormalizationResult()
        user_id = str(payload.get("user_id") or "")
        day = payload.get("day")
        try:
            result.records.append(self._parse_task(payload, date_range, user_id=user_id))
        except (_Skip, MalformedRecordError, KeyError, TypeError, ValueError, AttributeError) as exc:
            self._skip(result, user_id, str(day) if day is not None else None, exc)
        return result

    def _parse_task(self, payload: Mapping[str, Any], date_range: DateRange, *, user_id: str) -> CheckInRecord:
        records = payload.get("records")
        if not isinstance(records, list) or not records:
            raise _Skip(SkipReason.MISSING_RECORDS)

        punch = next((r for r in records if isinstance(r, Mapping) and r.get("check_in_record")), None)
        if punch is None:
            raise _Skip(SkipReason.MISSING_CHECK_IN_RECORD)

        raw_time = punch["check_in_record"].get("check_time")
        try:
            moment = from_unix(raw_time, self._timezone)
        except MalformedRecordError as exc:
            raise _Skip(SkipReason.UNPARSEABLE_TIMESTAMP, str(exc)) from exc

        day = parse_compact_date(payload["day"]) if payload.get("day") is not None else moment.date()
        if day not in date_range:
            raise _Skip(SkipReason.OUT_OF_RANGE, day.isoformat())

        result_code = punch.get("check_in_result")
        if not result_code:
            status = CheckInStatus.UNKNOWN
        else:
            status = _TASK_RESULT_STATUS.get(result_code, CheckInStatus.ABNORMAL)

        check_in_type = punch.get("check_in_type")
        record = CheckInRecord.create(
            date=day.isoformat(),
            check_in_time=moment.strftime("%H:%M:%S"),
            user_id=user_id,
            user_name=payload.get("employee_name") or UNKNOWN_USER_NAME,
            department=self._departments.get(user_id) or UNKNOWN_DEPARTMENT,
            status=status,
            is_late=False,
            check_in_type=check_in_type,
            source=self.source,
            window=self._window,
        )
        decision = self._strategy.decide(
            total_minutes=record.total_minutes,
            upstream_flag=status == CheckInStatus.LATE,
            check_in_type=check_in_type,
        )
        return _with_late(record, decision.is_late)


def _with_late(record: CheckInRecord, is_late: bool) -> CheckInRecord:
    if record.is_late == is_late:
        return record
    return replace(record, is_late=is_late)
