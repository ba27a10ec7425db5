from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import requests

from ..core.constants import DEFAULT_HTTP_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://open.feishu.cn/open-apis"


class FeishuHttpClient:
    """Thin JSON-over-HTTP wrapper around a requests.Session.

    4xx responses still carry a JSON body with a business `code`, so only 5xx
    statuses are raised here; callers inspect `code` themselves.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
    ):
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    def url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def post_json(
        self,
        path: str,
        *,
        json: Mapping[str, Any],
        params: Optional[Mapping[str, Any]] = None,
        token: Optional[str] = None,
    ) -> dict:
        headers = {"Content-Type": "application/json; charset=utf-8"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        response = self._session.post(self.url(path), json=json, params=params, headers=headers, timeout=self._timeout)
        logger.debug("POST %s -> %s", path, response.status_code)
        if response.status_code >= 500:
            response.raise_for_status()

        try:
            body = response.json()
        except ValueError as exc:
            raise requests.RequestException(f"Non-JSON response from {path} (status {response.status_code})") from exc
        if not isinstance(body, dict):
            raise requests.RequestException(f"Unexpected response body from {path}: {type(body).__name__}")
        return body
