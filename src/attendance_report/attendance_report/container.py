from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .attendance.interfaces import AttendanceSource, ReportSink
from .attendance.service import AttendanceService
from .common.cache import TtlCache
from .core.config import ReportConfig
from .core.enums import SourceKind
from .feishu.attendance_source import StatsAttendanceSource, TaskAttendanceSource
from .feishu.client import DEFAULT_BASE_URL, FeishuHttpClient
from .feishu.message_sink import ApiMessageSink, LogSink, WebhookSink
from .feishu.token_provider import TenantTokenProvider
from .report.text_renderer import TextReportRenderer


@dataclass(frozen=True)
class Container:
    config: ReportConfig
    http: FeishuHttpClient

    token_cache: TtlCache
    result_cache: TtlCache

    token_provider: TenantTokenProvider
    source: AttendanceSource
    sinks: tuple[ReportSink, ...]

    attendance_service: AttendanceService
    trigger_key: str | None = None


def _setting(settings: Any, name: str, default=None):
    if isinstance(settings, dict):
        return settings.get(name, default)
    return getattr(settings, name, default)


def _csv(value) -> list[str]:
    return [s.strip() for s in str(value or "").split(",") if s.strip()]


def build_container(*, settings: Any) -> Container:
    config = ReportConfig.from_settings(settings)

    http = FeishuHttpClient(
        base_url=_setting(settings, "FEISHU_BASE_URL") or DEFAULT_BASE_URL,
        timeout=float(_setting(settings, "HTTP_TIMEOUT", 10)),
    )
    # Token cache entries carry their own TTL (provider expiry minus margin).
    token_cache = TtlCache(default_ttl=0)
    result_cache = TtlCache(default_ttl=config.result_cache_ttl)

    token_provider = TenantTokenProvider(
        _setting(settings, "APP_ID"),
        _setting(settings, "APP_SECRET"),
        http=http,
        cache=token_cache,
    )

    batch_size = _setting(settings, "BATCH_SIZE")
    source_kwargs = {
        "batch_size": int(batch_size) if batch_size else None,
        "batch_delay": float(_setting(settings, "BATCH_DELAY", 1.0)),
    }
    if config.source_kind == SourceKind.TASK:
        source: AttendanceSource = TaskAttendanceSource(http, **source_kwargs)
    else:
        source = StatsAttendanceSource(http, query_user_id=config.query_user_id, **source_kwargs)

    renderer = TextReportRenderer(title=config.title)
    sinks: list[ReportSink] = []
    webhook_url = _setting(settings, "WEBHOOK_URL")
    chat_id = _setting(settings, "CHAT_ID")
    if webhook_url:
        sinks.append(WebhookSink(webhook_url, renderer=renderer))
    elif chat_id:
        sinks.append(
            ApiMessageSink(
                http,
                token_provider,
                chat_id,
                additional_chat_ids=_csv(_setting(settings, "ADDITIONAL_CHAT_IDS")),
                renderer=renderer,
            )
        )
    else:
        sinks.append(LogSink(renderer=renderer))

    attendance_service = AttendanceService(
        token_provider,
        source,
        sinks,
        config=config,
        result_cache=result_cache,
    )

    return Container(
        config=config,
        http=http,
        token_cache=token_cache,
        result_cache=result_cache,
        token_provider=token_provider,
        source=source,
        sinks=tuple(sinks),
        attendance_service=attendance_service,
        trigger_key=_setting(settings, "TRIGGER_KEY") or None,
    )
