from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..common.cache import TtlCache
from ..common.datetime_utils import last_n_days, previous_iso_week
from ..core.config import ReportConfig
from ..core.enums import SourceKind
from ..core.exceptions import UpstreamError
from ..report.assembler import ReportAssembler
from ..report.model import AttendanceReport
from .aggregation import AggregationEngine
from .factory import LatenessStrategyFactory
from .interfaces import AttendanceSource, DeliveryResult, ReportSink, TokenProvider
from .normalizer import DateRange, RawRecordNormalizer, StatsRecordNormalizer, TaskRecordNormalizer
from .ranking import RankingEngine

logger = logging.getLogger(__name__)

STATS_ENTRIES_KEY = "user_datas"
TASK_ENTRIES_KEY = "user_task_results"

PROCESSING_FAILED_TITLE = "Attendance report processing failed"
UPSTREAM_FAILED_TITLE = "Attendance statistics unavailable"


def resolve_period(config: ReportConfig, today: Optional[date] = None) -> tuple[date, date]:
    """Last `date_range_days` days ending yesterday, else the previous ISO week."""
    today = today or date.today()
    if config.date_range_days:
        return last_n_days(today, config.date_range_days)
    return previous_iso_week(today)


def detect_source_kind(raw_payload: Any, fallback: Optional[SourceKind] = None) -> SourceKind:
    if isinstance(raw_payload, Mapping):
        if STATS_ENTRIES_KEY in raw_payload:
            return SourceKind.STATS
        if TASK_ENTRIES_KEY in raw_payload:
            return SourceKind.TASK
    return SourceKind(fallback) if fallback else SourceKind.STATS


def _entries(raw_payload: Any, kind: SourceKind) -> list:
    if not isinstance(raw_payload, Mapping):
        return []
    key = STATS_ENTRIES_KEY if kind == SourceKind.STATS else TASK_ENTRIES_KEY
    entries = raw_payload.get(key)
    return entries if isinstance(entries, list) else []


def build_normalizer(kind: SourceKind, config: ReportConfig, *, departments: Optional[Mapping[str, str]] = None) -> RawRecordNormalizer:
    factory = LatenessStrategyFactory(threshold_minutes=config.late_threshold_min, scope=config.late_punch_scope)
    if kind == SourceKind.TASK:
        return TaskRecordNormalizer(
            timezone=config.timezone,
            departments=departments,
            strategy_factory=factory,
            window=config.morning_window,
        )
    return StatsRecordNormalizer(strategy_factory=factory, window=config.morning_window)


def build_ranking_engine(config: ReportConfig) -> RankingEngine:
    factory = LatenessStrategyFactory(threshold_minutes=config.late_threshold_min, scope=config.late_punch_scope)
    return RankingEngine(
        window=config.morning_window,
        late_strategy=factory.for_mode(config.ranking_lateness_mode),
        calendar=config.workday_calendar,
        limit=config.ranking_limit,
    )


def build_assembler(config: ReportConfig) -> ReportAssembler:
    return ReportAssembler(
        total_days_mode=config.total_days_mode,
        fixed_total_days=config.fixed_total_days,
        calendar=config.workday_calendar,
        title=config.title,
    )


def build_attendance_report(
    raw_payload: Any,
    config: ReportConfig,
    *,
    period: Optional[tuple[date, date]] = None,
    source_kind: Optional[SourceKind] = None,
    departments: Optional[Mapping[str, str]] = None,
    today: Optional[date] = None,
) -> AttendanceReport:
    """Normalize -> aggregate -> rank -> assemble.

    Never raises for processing problems: they come back as an empty report
    with `message` set.
    """
    assembler = build_assembler(config)
    start, end = period or resolve_period(config, today)
    requested = (start.isoformat(), end.isoformat())

    try:
        kind = detect_source_kind(raw_payload, source_kind or config.source_kind)
        entries = _entries(raw_payload, kind)
        if not entries:
            logger.warning("No user entries in %s payload", kind.value)
            return assembler.assemble({}, [], fallback_period=requested, today=today)

        logger.info("Processing %d %s entries for %s..%s", len(entries), kind.value, start, end)
        normalized = build_normalizer(kind, config, departments=departments).normalize_many(entries, DateRange(start, end))
        records = normalized.records

        department_stats = AggregationEngine().aggregate(records)

        ranking = build_ranking_engine(config)
        rankings = ranking.rank(records)
        in_window = sum(1 for r in records if r.is_in_morning_range)
        logger.info("%d of %d records inside the morning window, %d users ranked", in_window, len(records), len(rankings))

        return assembler.assemble(
            department_stats,
            records,
            period=requested,
            rankings=ranking.views(rankings),
            today=today,
        )
    except Exception as exc:
        logger.exception("Failed to process attendance data")
        return assembler.placeholder(
            f"processing failed: {exc}",
            title=PROCESSING_FAILED_TITLE,
            period=requested,
            today=today,
        )


def fetch_and_build_report(
    token_provider: TokenProvider,
    source: AttendanceSource,
    config: ReportConfig,
    *,
    departments: Optional[Mapping[str, str]] = None,
    today: Optional[date] = None,
) -> AttendanceReport:
    """Token -> fetch -> build. AuthError propagates; UpstreamError becomes a placeholder report."""
    start, end = resolve_period(config, today)
    token = token_provider.get_token()

    logger.info("Fetching attendance for %d users, %s..%s", len(config.user_ids), start, end)
    try:
        payload = source.fetch_raw_records(start, end, list(config.user_ids), token=token)
    except UpstreamError as exc:
        logger.error("Attendance API error: %s", exc)
        return build_assembler(config).placeholder(
            f"Failed to fetch attendance data: {exc.message} (code {exc.code})",
            title=UPSTREAM_FAILED_TITLE,
            period=(start, end),
            today=today,
        )

    return build_attendance_report(
        payload,
        config,
        period=(start, end),
        source_kind=getattr(source, "kind", None),
        departments=departments,
        today=today,
    )


class AttendanceService:
    def __init__(
        self,
        token_provider: TokenProvider,
        source: AttendanceSource,
        sinks: Sequence[ReportSink] = (),
        *,
        config: ReportConfig,
        result_cache: Optional[TtlCache] = None,
        departments: Optional[Mapping[str, str]] = None,
    ):
        self._token_provider = token_provider
        self._source = source
        self._sinks = list(sinks)
        self._config = config
        self._cache = result_cache
        self._departments = departments

    @property
    def config(self) -> ReportConfig:
        return self._config

    def _cache_key(self, today: Optional[date]) -> tuple:
        start, end = resolve_period(self._config, today)
        return ("report", getattr(self._source, "kind", None), start, end)

    def build_report(self, *, today: Optional[date] = None, use_cache: bool = True) -> AttendanceReport:
        key = self._cache_key(today)
        if use_cache and self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.info("Using cached attendance report for %s..%s", key[2], key[3])
                return cached

        report = fetch_and_build_report(
            self._token_provider,
            self._source,
            self._config,
            departments=self._departments,
            today=today,
        )

        # Only successful runs are worth reusing.
        if self._cache is not None and report.has_data:
            self._cache.set(key, report, ttl=self._config.result_cache_ttl)
        return report

    def run(self, *, today: Optional[date] = None) -> list[DeliveryResult]:
        """Build and deliver. DeliverySinkError propagates to the caller."""
        report = self.build_report(today=today)
        if not self._sinks:
            logger.warning("No report sink configured; report built but not sent")
            return []

        results = []
        for sink in self._sinks:
            results.append(sink.send(report))
        logger.info("Attendance report delivered to %d sink(s)", len(results))
        return results
