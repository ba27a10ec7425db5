from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import SourceKind


@dataclass(frozen=True)
class DeliveryResult:
    channel: str
    ok: bool
    detail: Optional[str] = None


class TokenProvider(Protocol):
    def get_token(self) -> str:
        """Return a valid access token.

        Raises AuthError when credentials are missing or rejected.
        """

        raise NotImplementedError


class AttendanceSource(Protocol):
    kind: SourceKind

    def fetch_raw_records(self, start: date, end: date, user_ids: Sequence[str], *, token: str) -> Mapping[str, Any]:
        """Return the upstream `data` object for the range.

        Raises UpstreamError on a non-success business code or transport failure.
        """

        raise NotImplementedError


class ReportSink(Protocol):
    def send(self, report) -> DeliveryResult:
        """Deliver a built report. Raises DeliverySinkError on failure."""

        raise NotImplementedError
