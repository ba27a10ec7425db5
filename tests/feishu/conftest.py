from __future__ import annotations

import pytest
import requests

from src.attendance_report.attendance_report.feishu.client import FeishuHttpClient


class FakeResponse:
    def __init__(self, body=None, status_code=200):
        self._body = body
        self.status_code = status_code

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    """Replays queued responses (or raises queued exceptions) and records every call."""

    def __init__(self, *responses):
        self._responses = list(responses)
        self.calls = []

    def queue(self, *responses):
        self._responses.extend(responses)

    def post(self, url, *, json=None, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "params": params, "headers": headers, "timeout": timeout})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, FakeResponse):
            return item
        return FakeResponse(item)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def http(session):
    return FeishuHttpClient(base_url="https://feishu.test/open-apis", session=session, timeout=3)


@pytest.fixture
def response_factory():
    return FakeResponse
