from __future__ import annotations

import logging
from typing import Optional

import requests

from ..common.cache import TtlCache
from ..common.logging_setup import mask_token
from ..core.constants import TOKEN_EXPIRY_MARGIN_SECONDS
from ..core.exceptions import AuthError
from .client import FeishuHttpClient

logger = logging.getLogger(__name__)

TOKEN_PATH = "auth/v3/tenant_access_token/internal"
TOKEN_CACHE_KEY = "tenant_access_token"


class TenantTokenProvider:
    """Tenant access token with an injected TTL cache.

    The cached token expires `margin` seconds before the provider says so.
    """

    def __init__(
        self,
        app_id: Optional[str],
        app_secret: Optional[str],
        *,
        http: FeishuHttpClient,
        cache: TtlCache,
        margin: int = TOKEN_EXPIRY_MARGIN_SECONDS,
    ):
        self._app_id = app_id
        self._app_secret = app_secret
        self._http = http
        self._cache = cache
        self._margin = int(margin)

    def invalidate(self) -> None:
        self._cache.invalidate(TOKEN_CACHE_KEY)

    def get_token(self) -> str:
        cached = self._cache.get(TOKEN_CACHE_KEY)
        if cached:
            logger.debug("Using cached tenant access token")
            return cached

        if not self._app_id or not self._app_secret:
            raise AuthError("APP_ID or APP_SECRET is not configured")

        logger.info("Requesting a new tenant access token")
        try:
            body = self._http.post_json(TOKEN_PATH, json={"app_id": self._app_id, "app_secret": self._app_secret})
        except requests.RequestException as exc:
            raise AuthError(f"Token request failed: {exc}") from exc

        if body.get("code") != 0:
            raise AuthError(f"Token request rejected: {body.get('msg')} (code={body.get('code')})")

        token = body.get("tenant_access_token")
        if not token:
            raise AuthError("Token response has no tenant_access_token")

        try:
            expire = int(body.get("expire") or 0)
        except (TypeError, ValueError):
            expire = 0
        self._cache.set(TOKEN_CACHE_KEY, token, ttl=expire - self._margin)

        logger.info("Obtained tenant access token %s (expires in %ss)", mask_token(token), expire)
        return token
