from __future__ import annotations

from typing import Optional

from ...core.constants import DEFAULT_LATE_THRESHOLD_MINUTES
from ...core.enums import LatenessMode, LatePunchScope
from .base import LatenessDecision, LatenessStrategy


class ThresholdStrategy(LatenessStrategy):
    """Late iff the check-in is strictly after the threshold (08:00 by default)."""

    mode = LatenessMode.THRESHOLD

    def __init__(
        self,
        threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES,
        *,
        scope: LatePunchScope = LatePunchScope.ON_DUTY_ONLY,
    ):
        super().__init__(scope=scope)
        self.threshold_minutes = int(threshold_minutes)

    def decide(
        self,
        *,
        total_minutes: float,
        upstream_flag: Optional[bool] = None,
        check_in_type: Optional[str] = None,
    ) -> LatenessDecision:
        if not self.counts_punch(check_in_type):
            return LatenessDecision(is_late=False, note="punch type not counted")
        return LatenessDecision(is_late=total_minutes > self.threshold_minutes)
