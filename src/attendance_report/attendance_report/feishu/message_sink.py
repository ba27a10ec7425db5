from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

import requests
from retrying import Retrying

from ..attendance.interfaces import DeliveryResult, TokenProvider
from ..core.exceptions import DeliverySinkError
from ..report.model import AttendanceReport
from ..report.text_renderer import TextReportRenderer
from .client import FeishuHttpClient

logger = logging.getLogger(__name__)

MESSAGE_PATH = "im/v1/messages"

DEFAULT_ATTEMPTS = 3
DEFAULT_BACKOFF_MS = 1000


def _is_transport_error(exc: Exception) -> bool:
    return isinstance(exc, requests.RequestException)


class _RetryingSink:
    def __init__(self, *, renderer: Optional[TextReportRenderer] = None, attempts: int = DEFAULT_ATTEMPTS, backoff_ms: int = DEFAULT_BACKOFF_MS):
        self._renderer = renderer or TextReportRenderer()
        self._attempts = int(attempts)
        self._backoff_ms = int(backoff_ms)

    def _retrying(self) -> Retrying:
        # 3 attempts, waits double each time (backoff_ms * 2^n); business errors are not retried.
        return Retrying(
            stop_max_attempt_number=self._attempts,
            wait_exponential_multiplier=self._backoff_ms,
            retry_on_exception=_is_transport_error,
        )


class ApiMessageSink(_RetryingSink):
    """Send a text message to a chat through the IM API.

    The primary chat must succeed; additional chats are best effort.
    """

    def __init__(
        self,
        http: FeishuHttpClient,
        token_provider: TokenProvider,
        chat_id: str,
        *,
        additional_chat_ids: Sequence[str] = (),
        **kwargs,
    ):
        super().__init__(**kwargs)
        if not chat_id:
            raise DeliverySinkError("CHAT_ID is not configured")
        self._http = http
        self._tokens = token_provider
        self._chat_id = chat_id
        self._additional = [c for c in additional_chat_ids if c and c != chat_id]

    def _post(self, chat_id: str, text: str, token: str) -> dict:
        body = self._http.post_json(
            MESSAGE_PATH,
            params={"receive_id_type": "chat_id"},
            json={"receive_id": chat_id, "msg_type": "text", "content": json.dumps({"text": text}, ensure_ascii=False)},
            token=token,
        )
        if body.get("code") != 0:
            raise DeliverySinkError(f"Message rejected for chat {chat_id}: {body.get('msg')} (code={body.get('code')})")
        return body

    def send(self, report: AttendanceReport) -> DeliveryResult:
        text = self._renderer.render(report)
        token = self._tokens.get_token()

        logger.info("Sending attendance report to chat %s", self._chat_id)
        try:
            self._retrying().call(self._post, self._chat_id, text, token)
        except requests.RequestException as exc:
            raise DeliverySinkError(f"Failed to send message to chat {self._chat_id}: {exc}") from exc

        failed = []
        for chat_id in self._additional:
            try:
                self._retrying().call(self._post, chat_id, text, token)
                logger.info("Attendance report sent to additional chat %s", chat_id)
            except (requests.RequestException, DeliverySinkError) as exc:
                logger.warning("Failed to send to additional chat %s: %s", chat_id, exc)
                failed.append(chat_id)

        detail = f"additional chats failed: {', '.join(failed)}" if failed else None
        return DeliveryResult(channel=f"chat:{self._chat_id}", ok=True, detail=detail)


class WebhookSink(_RetryingSink):
    """Incoming-webhook bot (no token needed)."""

    def __init__(self, webhook_url: str, *, session: Optional[requests.Session] = None, timeout: float = 10, **kwargs):
        super().__init__(**kwargs)
        if not webhook_url:
            raise DeliverySinkError("WEBHOOK_URL is not configured")
        self._url = webhook_url
        self._http = FeishuHttpClient(base_url=webhook_url, session=session, timeout=timeout)

    def _post(self, text: str) -> dict:
        body = self._http.post_json(self._url, json={"msg_type": "text", "content": {"text": text}})
        code = body.get("code", body.get("StatusCode", 0))
        if code != 0:
            raise DeliverySinkError(f"Webhook rejected message: {body.get('msg') or body.get('StatusMessage')} (code={code})")
        return body

    def send(self, report: AttendanceReport) -> DeliveryResult:
        text = self._renderer.render(report)
        logger.info("Sending attendance report via webhook")
        try:
            self._retrying().call(self._post, text)
        except requests.RequestException as exc:
            raise DeliverySinkError(f"Webhook delivery failed: {exc}") from exc
        return DeliveryResult(channel="webhook", ok=True)


class LogSink:
    """Local runs without a chat configured: print the rendered report to the log."""

    def __init__(self, *, renderer: Optional[TextReportRenderer] = None):
        self._renderer = renderer or TextReportRenderer()

    def send(self, report: AttendanceReport) -> DeliveryResult:
        logger.info("Attendance report (local, not sent):\n%s", self._renderer.render(report))
        return DeliveryResult(channel="log", ok=True)
