from __future__ import annotations

from typing import Optional

from ...core.enums import LatenessMode
from .base import LatenessDecision, LatenessStrategy


class UpstreamFlagStrategy(LatenessStrategy):
    """Late iff upstream flagged the day abnormal; the clock time is not consulted."""

    mode = LatenessMode.UPSTREAM_FLAG

    def decide(
        self,
        *,
        total_minutes: float,
        upstream_flag: Optional[bool] = None,
        check_in_type: Optional[str] = None,
    ) -> LatenessDecision:
        if not self.counts_punch(check_in_type):
            return LatenessDecision(is_late=False, note="punch type not counted")
        return LatenessDecision(is_late=bool(upstream_flag))
