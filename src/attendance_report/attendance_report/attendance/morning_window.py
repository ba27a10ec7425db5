from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import MORNING_END_MINUTES, MORNING_START_MINUTES
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class WindowDecision:
    in_morning_range: bool


@dataclass(frozen=True)
class MorningWindow:
    """Inclusive [start_min, end_min] interval in minutes since midnight.

    Only decides window membership. Lateness lives in the strategies.
    """

    start_min: int = MORNING_START_MINUTES
    end_min: int = MORNING_END_MINUTES

    def __post_init__(self):
        if not (0 <= self.start_min <= self.end_min <= 24 * 60 - 1):
            raise ValidationError(f"Invalid morning window {self.start_min}-{self.end_min}")

    def contains(self, total_minutes: float) -> bool:
        return self.start_min <= total_minutes <= self.end_min

    def classify(self, total_minutes: float) -> WindowDecision:
        return WindowDecision(in_morning_range=self.contains(total_minutes))


DEFAULT_MORNING_WINDOW = MorningWindow()
