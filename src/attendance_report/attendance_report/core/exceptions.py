from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for the reporting pipeline."""


class ValidationError(DomainError):
    """Raised when configuration values are invalid."""


class AuthError(DomainError):
    """Raised when the access token cannot be obtained. Fatal for a run."""


class UpstreamError(DomainError):
    """Attendance API reachable but returned a business error (or no usable response)."""

    def __init__(self, code: Optional[int | str], message: str):
        super().__init__(f"{message} (code={code})")
        self.code = code
        self.message = message


class MalformedRecordError(DomainError):
    """Raised while parsing one upstream entry; always recovered by the normalizer."""


class DeliverySinkError(DomainError):
    """Raised when a built report could not be delivered."""
