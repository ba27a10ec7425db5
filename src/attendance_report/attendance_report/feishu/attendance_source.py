from __future__ import annotations

import logging
import time
from datetime import date
from typing import Any, Callable, Optional, Sequence

import requests

from ..common.datetime_utils import to_compact_int
from ..core.constants import DEFAULT_BATCH_DELAY_SECONDS
from ..core.enums import SourceKind
from ..core.exceptions import UpstreamError
from .client import FeishuHttpClient

logger = logging.getLogger(__name__)

STATS_PATH = "attendance/v1/user_stats_datas/query"
TASK_PATH = "attendance/v1/user_tasks/query"

RATE_LIMITED_CODE = 99991663


class _FeishuAttendanceSource:
    kind: SourceKind
    path: str
    entries_key: str

    def __init__(
        self,
        http: FeishuHttpClient,
        *,
        batch_size: Optional[int] = None,
        batch_delay: float = DEFAULT_BATCH_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._http = http
        self._batch_size = int(batch_size) if batch_size else None
        self._batch_delay = float(batch_delay)
        self._sleep = sleep

    def build_body(self, start: date, end: date, user_ids: Sequence[str]) -> dict:
        raise NotImplementedError

    def fetch_raw_records(self, start: date, end: date, user_ids: Sequence[str], *, token: str) -> dict:
        user_ids = list(user_ids)
        if not self._batch_size or len(user_ids) <= self._batch_size:
            return self._query(self.build_body(start, end, user_ids), token)

        # Batched mode: sequential, with a pause between batches for the rate limit.
        merged: dict[str, Any] = {self.entries_key: []}
        batches = [user_ids[i:i + self._batch_size] for i in range(0, len(user_ids), self._batch_size)]
        for index, batch in enumerate(batches):
            if index:
                self._sleep(self._batch_delay)
            logger.info("Fetching batch %d/%d (%d users)", index + 1, len(batches), len(batch))
            data = self._query(self.build_body(start, end, batch), token)
            merged[self.entries_key].extend(data.get(self.entries_key) or [])
        return merged

    def _query(self, body: dict, token: str) -> dict:
        try:
            response = self._http.post_json(self.path, json=body, params={"employee_type": "employee_id"}, token=token)
        except requests.RequestException as exc:
            logger.error("Attendance API request failed: %s", exc)
            raise UpstreamError(None, f"request failed: {exc}") from exc

        code = response.get("code")
        if code != 0:
            msg = response.get("msg") or "unknown error"
            if code == RATE_LIMITED_CODE:
                logger.error("Attendance API rate limit hit")
            raise UpstreamError(code, msg)

        data = response.get("data")
        if not isinstance(data, dict):
            logger.warning("Attendance API response has no data field")
            return {}
        logger.debug("Attendance API returned %d entries", len(data.get(self.entries_key) or []))
        return data


class StatsAttendanceSource(_FeishuAttendanceSource):
    """Monthly stats with per-day columns (user_stats_datas/query)."""

    kind = SourceKind.STATS
    path = STATS_PATH
    entries_key = "user_datas"

    def __init__(self, http: FeishuHttpClient, *, query_user_id: Optional[str] = None, **kwargs):
        super().__init__(http, **kwargs)
        self._query_user_id = query_user_id

    def build_body(self, start: date, end: date, user_ids: Sequence[str]) -> dict:
        body = {
            "current_group_only": True,
            "end_date": to_compact_int(end),
            "locale": "zh",
            "need_history": True,
            "start_date": to_compact_int(start),
            "stats_type": "month",
            "user_ids": list(user_ids),
        }
        if self._query_user_id:
            body["user_id"] = self._query_user_id
        return body


class TaskAttendanceSource(_FeishuAttendanceSource):
    """Per-day punch tasks (user_tasks/query)."""

    kind = SourceKind.TASK
    path = TASK_PATH
    entries_key = "user_task_results"

    def build_body(self, start: date, end: date, user_ids: Sequence[str]) -> dict:
        return {
            "user_ids": list(user_ids),
            "check_date_from": to_compact_int(start),
            "check_date_to": to_compact_int(end),
        }
