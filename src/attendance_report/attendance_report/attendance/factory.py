from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_LATE_THRESHOLD_MINUTES
from ..core.enums import LatenessMode, LatePunchScope, SourceKind
from .strategies.base import LatenessStrategy
from .strategies.threshold_strategy import ThresholdStrategy
from .strategies.upstream_flag_strategy import UpstreamFlagStrategy

# Stats rows carry their own Abnormal flag; task rows only carry a timestamp.
_MODE_BY_SOURCE = {
    SourceKind.STATS: LatenessMode.UPSTREAM_FLAG,
    SourceKind.TASK: LatenessMode.THRESHOLD,
}


@dataclass
class LatenessStrategyFactory:
    """Factory Pattern: choose the lateness strategy for a source or a mode."""

    threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES
    scope: LatePunchScope = LatePunchScope.ON_DUTY_ONLY

    def for_mode(self, mode: LatenessMode) -> LatenessStrategy:
        if mode == LatenessMode.UPSTREAM_FLAG:
            return UpstreamFlagStrategy(scope=self.scope)
        return ThresholdStrategy(self.threshold_minutes, scope=self.scope)

    def for_source(self, source: SourceKind) -> LatenessStrategy:
        return self.for_mode(_MODE_BY_SOURCE[SourceKind(source)])
