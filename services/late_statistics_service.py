"""
Monthly lateness accumulation and punishment escalation.

Buckets are keyed by (employee_id, YYYY-MM) in the configured timezone and
created lazily on the first late check-in of a month. The punishment flag on a
bucket only ever goes from False to True, so each employee escalates at most
once per month no matter how late they keep arriving.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from core.clock import SystemClock
from models.late_statistic import (
    LatenessRankEntry,
    MonthlyLateStatistic,
    MonthlySummary,
    PunishmentOutcome,
    ResetSummary,
)
from utils.datetime_helpers import round_minutes
from utils.timezone_helpers import previous_year_month, year_month

logger = logging.getLogger(__name__)

ArchiveHandler = Callable[[str, List[MonthlyLateStatistic]], None]


class LateStatisticsAggregator:
    def __init__(
        self,
        clock=None,
        tz: str = "Asia/Taipei",
        count_threshold: int = 3,
        minutes_threshold: int = 10,
        archive_handler: Optional[ArchiveHandler] = None,
    ):
        self.clock = clock or SystemClock()
        self.tz = tz
        self.count_threshold = count_threshold
        self.minutes_threshold = minutes_threshold
        self._archive_handler = archive_handler or self._keep_archive
        self._archive: Dict[str, List[MonthlyLateStatistic]] = {}
        # Guards bucket existence and counters; reset takes it for the whole sweep
        self._lock = threading.RLock()
        self._buckets: Dict[Tuple[str, str], MonthlyLateStatistic] = {}

    def current_year_month(self) -> str:
        return year_month(self.clock.now(), self.tz)

    def update_monthly(self, employee_id: str, late_minutes: int) -> PunishmentOutcome:
        if late_minutes == 0:
            return PunishmentOutcome(punishment_triggered=False)
        if late_minutes < 0:
            raise ValueError(f"late_minutes must be >= 0, got {late_minutes}")

        now = self.clock.now()
        month = year_month(now, self.tz)

        with self._lock:
            stats = self._buckets.get((employee_id, month))
            if stats is None:
                stats = MonthlyLateStatistic(
                    employee_id=employee_id, year_month=month, created_at=now, updated_at=now
                )
                self._buckets[(employee_id, month)] = stats

            stats.total_late_count += 1
            stats.total_late_minutes += late_minutes
            stats.total_late_days += 1
            stats.updated_at = now

            over_count = stats.total_late_count > self.count_threshold
            over_minutes = stats.total_late_minutes > self.minutes_threshold

            if (over_count or over_minutes) and not stats.punishment_triggered:
                stats.punishment_triggered = True
                if over_count:
                    reason = (
                        f"Monthly late count {stats.total_late_count} exceeds {self.count_threshold}."
                    )
                else:
                    reason = (
                        f"Monthly late minutes {stats.total_late_minutes} exceeds {self.minutes_threshold}."
                    )
                snapshot = stats.model_copy()
                logger.warning(
                    f"Punishment triggered for employee {employee_id} in {month}: {reason}"
                )
                return PunishmentOutcome(punishment_triggered=True, reason=reason, statistic=snapshot)

            return PunishmentOutcome(punishment_triggered=False, statistic=stats.model_copy())

    def reset_monthly(self, as_of: Optional[datetime] = None) -> ResetSummary:
        """
        Month rollover: hand last month's buckets to the archive and drop any
        buckets already created for the current month.

        Args:
            as_of: instant that decides which month is "current"; defaults to
                the clock. The rollover job passes the boundary it slept until
                so an early wake-up can't archive the wrong month.
        """
        now = as_of or self.clock.now()
        current = year_month(now, self.tz)
        previous = previous_year_month(now, self.tz)

        with self._lock:
            archived = [s for (_, month), s in self._buckets.items() if month == previous]
            self._buckets = {
                key: s for key, s in self._buckets.items() if key[1] not in (previous, current)
            }
            # Inside the lock so a concurrent reset can't interleave archive batches
            self._archive_handler(previous, [s.model_copy() for s in archived])

        logger.info(
            f"Monthly late statistics reset: archived {len(archived)} buckets from {previous}, reset {current}"
        )
        return ResetSummary(archived_count=len(archived), reset_month=current)

    def _keep_archive(self, month: str, stats: List[MonthlyLateStatistic]) -> None:
        self._archive.setdefault(month, []).extend(stats)

    def archived_statistics(self, month: str) -> List[MonthlyLateStatistic]:
        """Buckets archived by the default handler for a month."""
        with self._lock:
            return [s.model_copy() for s in self._archive.get(month, [])]

    def _month_buckets(self, month: Optional[str]) -> List[MonthlyLateStatistic]:
        month = month or self.current_year_month()
        with self._lock:
            return [s.model_copy() for (_, m), s in self._buckets.items() if m == month]

    def get_monthly_statistic(self, employee_id: str, month: Optional[str] = None) -> MonthlyLateStatistic:
        """The employee's bucket for a month, or a zeroed one if they were never late."""
        month = month or self.current_year_month()
        with self._lock:
            stats = self._buckets.get((employee_id, month))
            if stats is not None:
                return stats.model_copy()
        now = self.clock.now()
        return MonthlyLateStatistic(employee_id=employee_id, year_month=month, created_at=now, updated_at=now)

    def punishment_candidates(self, month: Optional[str] = None) -> List[MonthlyLateStatistic]:
        return [s for s in self._month_buckets(month) if s.punishment_triggered]

    def lateness_ranking(self, month: Optional[str] = None, limit: int = 10) -> List[LatenessRankEntry]:
        stats = sorted(
            self._month_buckets(month),
            key=lambda s: (s.total_late_minutes, s.total_late_count),
            reverse=True,
        )
        return [
            LatenessRankEntry(
                employee_id=s.employee_id,
                total_late_count=s.total_late_count,
                total_late_minutes=s.total_late_minutes,
                average_lateness=(
                    round_minutes(s.total_late_minutes * 60 / s.total_late_count)
                    if s.total_late_count
                    else 0
                ),
                punishment_triggered=s.punishment_triggered,
            )
            for s in stats[:limit]
        ]

    def summary(self, month: Optional[str] = None) -> MonthlySummary:
        month = month or self.current_year_month()
        stats = self._month_buckets(month)
        return MonthlySummary(
            year_month=month,
            late_employees=sum(1 for s in stats if s.total_late_count > 0),
            total_late_count=sum(s.total_late_count for s in stats),
            total_late_minutes=sum(s.total_late_minutes for s in stats),
            punishment_count=sum(1 for s in stats if s.punishment_triggered),
        )
