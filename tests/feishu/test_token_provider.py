import pytest
import requests

from src.attendance_report.attendance_report.common.cache import TtlCache
from src.attendance_report.attendance_report.core.exceptions import AuthError
from src.attendance_report.attendance_report.feishu.token_provider import TenantTokenProvider


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _provider(http, clock=None, app_id="cli_a", app_secret="secret"):
    return TenantTokenProvider(app_id, app_secret, http=http, cache=TtlCache(default_ttl=0, clock=clock))


def test_token_is_requested_once_and_cached(http, session):
    session.queue({"code": 0, "tenant_access_token": "t-abcdefghijkl", "expire": 7200})
    provider = _provider(http)

    assert provider.get_token() == "t-abcdefghijkl"
    assert provider.get_token() == "t-abcdefghijkl"

    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["url"] == "https://feishu.test/open-apis/auth/v3/tenant_access_token/internal"
    assert call["json"] == {"app_id": "cli_a", "app_secret": "secret"}
    assert call["timeout"] == 3


def test_token_refreshed_before_provider_expiry(http, session):
    clock = FakeClock()
    session.queue(
        {"code": 0, "tenant_access_token": "first-token-value", "expire": 7200},
        {"code": 0, "tenant_access_token": "second-token-value", "expire": 7200},
    )
    provider = _provider(http, clock)

    provider.get_token()
    clock.now = 7200 - 300 - 1
    assert provider.get_token() == "first-token-value"

    clock.now = 7200 - 300
    assert provider.get_token() == "second-token-value"


def test_invalidate_forces_new_request(http, session):
    session.queue(
        {"code": 0, "tenant_access_token": "first-token-value", "expire": 7200},
        {"code": 0, "tenant_access_token": "second-token-value", "expire": 7200},
    )
    provider = _provider(http)

    provider.get_token()
    provider.invalidate()

    assert provider.get_token() == "second-token-value"


def test_missing_credentials(http, session):
    with pytest.raises(AuthError):
        _provider(http, app_secret="").get_token()
    assert session.calls == []


@pytest.mark.parametrize(
    "response",
    [
        {"code": 10003, "msg": "invalid param"},
        {"code": 0, "expire": 7200},
        requests.ConnectionError("connection refused"),
    ],
)
def test_rejected_token_request(http, session, response):
    session.queue(response)

    with pytest.raises(AuthError):
        _provider(http).get_token()
