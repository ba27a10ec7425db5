import json

import pytest
import requests

from src.attendance_report.attendance_report.core.exceptions import DeliverySinkError
from src.attendance_report.attendance_report.feishu.message_sink import ApiMessageSink, LogSink, WebhookSink
from src.attendance_report.attendance_report.report.model import AttendanceReport, ReportPeriod


class FakeTokenProvider:
    def get_token(self):
        return "t-sink"


@pytest.fixture
def report():
    return AttendanceReport(title="Weekly", period=ReportPeriod("2025-03-10", "2025-03-16"), message="no data found")


def test_message_posted_to_chat(http, session, report):
    session.queue({"code": 0})
    sink = ApiMessageSink(http, FakeTokenProvider(), "oc_main", backoff_ms=0)

    result = sink.send(report)

    assert result.ok and result.channel == "chat:oc_main"
    call = session.calls[0]
    assert call["url"].endswith("/im/v1/messages")
    assert call["params"] == {"receive_id_type": "chat_id"}
    assert call["json"]["receive_id"] == "oc_main"
    assert call["json"]["msg_type"] == "text"
    text = json.loads(call["json"]["content"])["text"]
    assert "Weekly" in text and "no data found" in text


def test_transport_errors_are_retried(http, session, report, response_factory):
    session.queue(requests.ConnectionError("reset"), response_factory(status_code=502), {"code": 0})
    sink = ApiMessageSink(http, FakeTokenProvider(), "oc_main", backoff_ms=0)

    assert sink.send(report).ok
    assert len(session.calls) == 3


def test_gives_up_after_three_attempts(http, session, report):
    session.queue(*[requests.ConnectionError("reset")] * 3)
    sink = ApiMessageSink(http, FakeTokenProvider(), "oc_main", backoff_ms=0)

    with pytest.raises(DeliverySinkError):
        sink.send(report)
    assert len(session.calls) == 3


def test_business_rejection_is_not_retried(http, session, report):
    session.queue({"code": 230002, "msg": "bot not in chat"})
    sink = ApiMessageSink(http, FakeTokenProvider(), "oc_main", backoff_ms=0)

    with pytest.raises(DeliverySinkError):
        sink.send(report)
    assert len(session.calls) == 1


def test_additional_chats_are_best_effort(http, session, report):
    session.queue({"code": 0}, {"code": 230002, "msg": "bot not in chat"}, {"code": 0})
    sink = ApiMessageSink(
        http,
        FakeTokenProvider(),
        "oc_main",
        additional_chat_ids=["oc_a", "oc_main", "oc_b"],
        backoff_ms=0,
    )

    result = sink.send(report)

    assert result.ok
    assert result.detail == "additional chats failed: oc_a"
    assert [c["json"]["receive_id"] for c in session.calls] == ["oc_main", "oc_a", "oc_b"]


def test_chat_id_required(http):
    with pytest.raises(DeliverySinkError):
        ApiMessageSink(http, FakeTokenProvider(), "")


def test_webhook_payload(session, report):
    session.queue({"StatusCode": 0})
    sink = WebhookSink("https://hooks.test/bot/abc", session=session, backoff_ms=0)

    result = sink.send(report)

    assert result.channel == "webhook"
    call = session.calls[0]
    assert call["url"] == "https://hooks.test/bot/abc"
    assert call["json"]["msg_type"] == "text"
    assert "Weekly" in call["json"]["content"]["text"]
    assert "Authorization" not in call["headers"]


def test_webhook_rejection(session, report):
    session.queue({"code": 19001, "msg": "param invalid"})

    with pytest.raises(DeliverySinkError):
        WebhookSink("https://hooks.test/bot/abc", session=session, backoff_ms=0).send(report)


def test_log_sink(report, caplog):
    caplog.set_level("INFO")

    assert LogSink().send(report).channel == "log"
    assert "no data found" in caplog.text
