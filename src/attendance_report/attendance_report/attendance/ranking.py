from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence

from ..common.datetime_utils import minutes_to_clock, parse_iso_date
from ..common.workdays import WorkdayCalendar
from ..core.constants import DEFAULT_RANKING_LIMIT
from .model import CheckInRecord, UserRanking
from .morning_window import DEFAULT_MORNING_WINDOW, MorningWindow
from .strategies.base import LatenessStrategy
from .strategies.threshold_strategy import ThresholdStrategy

RecordPredicate = Callable[[CheckInRecord], bool]


@dataclass
class _UserAccumulator:
    user_id: str
    user_name: str
    department: str
    minutes: list[int] = field(default_factory=list)
    dates: set[str] = field(default_factory=set)
    late_dates: list[str] = field(default_factory=list)


def top_n(rankings: Sequence[UserRanking], n: int = DEFAULT_RANKING_LIMIT) -> list[UserRanking]:
    return list(rankings[: max(n, 0)])


def bottom_n(rankings: Sequence[UserRanking], n: int = DEFAULT_RANKING_LIMIT) -> list[UserRanking]:
    """Latest-average users, never repeating anyone already in top_n.

    population <= n      -> the full sorted list (shown once by renderers)
    n < population < 2n  -> whoever is left after the top n
    otherwise            -> the last n
    """
    n = max(n, 0)
    size = len(rankings)
    if size <= n:
        return list(rankings)
    return list(rankings[max(n, size - n):])


def late_ranking(rankings: Iterable[UserRanking]) -> list[UserRanking]:
    """Descending by late_count; stable, so equal counts keep ranking order."""
    return sorted(rankings, key=lambda u: u.late_count, reverse=True)


@dataclass(frozen=True)
class RankingViews:
    ranked: tuple[UserRanking, ...]
    top: tuple[UserRanking, ...]
    bottom: tuple[UserRanking, ...]
    late: tuple[UserRanking, ...]
    limit: int

    @property
    def single_list(self) -> bool:
        """Population fits in one view; bottom equals the whole list."""
        return len(self.ranked) <= self.limit

    @property
    def late_users(self) -> tuple[UserRanking, ...]:
        return tuple(u for u in self.late if u.late_count > 0)

    def to_dict(self) -> dict:
        return {
            "limit": self.limit,
            "singleList": self.single_list,
            "top": [u.to_dict() for u in self.top],
            "bottom": [u.to_dict() for u in self.bottom],
            "late": [u.to_dict() for u in self.late],
        }


class RankingEngine:
    """Rank users by average daily-first check-in inside the morning window."""

    def __init__(
        self,
        *,
        window: MorningWindow = DEFAULT_MORNING_WINDOW,
        late_strategy: Optional[LatenessStrategy] = None,
        calendar: Optional[WorkdayCalendar] = None,
        limit: int = DEFAULT_RANKING_LIMIT,
    ):
        self._window = window
        self._late_strategy = late_strategy or ThresholdStrategy()
        self._calendar = calendar
        self._limit = int(limit)

    @property
    def limit(self) -> int:
        return self._limit

    def _in_scope(self, record: CheckInRecord, window_filter: Optional[RecordPredicate]) -> bool:
        if window_filter is not None:
            if not window_filter(record):
                return False
        elif not self._window.contains(record.total_minutes):
            return False
        if self._calendar is not None and not self._calendar.is_workday(parse_iso_date(record.date)):
            return False
        return True

    def rank(self, records: Iterable[CheckInRecord], window_filter: Optional[RecordPredicate] = None) -> list[UserRanking]:
        users: dict[str, _UserAccumulator] = {}

        for r in records:
            if not self._in_scope(r, window_filter):
                continue

            acc = users.get(r.user_id)
            if acc is None:
                acc = _UserAccumulator(user_id=r.user_id, user_name=r.user_name, department=r.department)
                users[r.user_id] = acc

            # First punch of the day counts; later ones are ignored.
            if r.date in acc.dates:
                continue
            acc.dates.add(r.date)
            acc.minutes.append(r.total_minutes)

            decision = self._late_strategy.decide(
                total_minutes=r.total_minutes,
                upstream_flag=r.is_late,
                check_in_type=r.check_in_type,
            )
            if decision.is_late:
                acc.late_dates.append(r.date)

        rankings = []
        for acc in users.values():
            avg = sum(acc.minutes) / len(acc.minutes)
            rankings.append(
                UserRanking(
                    user_id=acc.user_id,
                    user_name=acc.user_name,
                    department=acc.department,
                    avg_check_in_time=minutes_to_clock(avg),
                    check_in_count=len(acc.minutes),
                    late_count=len(acc.late_dates),
                    late_dates=tuple(acc.late_dates),
                    total_minutes=avg,
                )
            )

        # list.sort is stable: ties keep the order users were first seen.
        rankings.sort(key=lambda u: u.total_minutes)
        return rankings

    def views(self, rankings: Sequence[UserRanking], limit: Optional[int] = None) -> RankingViews:
        n = self._limit if limit is None else int(limit)
        return RankingViews(
            ranked=tuple(rankings),
            top=tuple(top_n(rankings, n)),
            bottom=tuple(bottom_n(rankings, n)),
            late=tuple(late_ranking(rankings)),
            limit=n,
        )
