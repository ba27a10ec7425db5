from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import LatenessMode, LatePunchScope

ON_DUTY = "OnDuty"


@dataclass(frozen=True)
class LatenessDecision:
    is_late: bool
    note: Optional[str] = None


class LatenessStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide whether a punch is late."""

    mode: LatenessMode

    def __init__(self, *, scope: LatePunchScope = LatePunchScope.ON_DUTY_ONLY):
        self.scope = scope

    def counts_punch(self, check_in_type: Optional[str]) -> bool:
        """Whether this punch type can be late at all under the configured scope."""
        if self.scope == LatePunchScope.ANY_PUNCH:
            return True
        return not check_in_type or check_in_type == ON_DUTY

    @abstractmethod
    def decide(
        self,
        *,
        total_minutes: float,
        upstream_flag: Optional[bool] = None,
        check_in_type: Optional[str] = None,
    ) -> LatenessDecision:
        raise NotImplementedError
