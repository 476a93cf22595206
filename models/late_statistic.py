from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


# Per-Employee, Per-Month Lateness Accumulator ("month bucket")
class MonthlyLateStatistic(BaseModel):
    employee_id: str
    year_month: str  # YYYY-MM
    total_late_count: int = 0
    total_late_minutes: int = 0
    total_late_days: int = 0
    # Only ever flips False -> True while the bucket lives
    punishment_triggered: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# Handed to the promotion/voting subsystem on the first threshold crossing of a month
class PunishmentTrigger(BaseModel):
    employee_id: str
    year_month: str
    reason: str
    statistic: MonthlyLateStatistic


class PunishmentOutcome(BaseModel):
    punishment_triggered: bool = False
    reason: Optional[str] = None
    statistic: Optional[MonthlyLateStatistic] = None

    def as_trigger(self) -> Optional[PunishmentTrigger]:
        if not self.punishment_triggered or self.statistic is None:
            return None
        return PunishmentTrigger(
            employee_id=self.statistic.employee_id,
            year_month=self.statistic.year_month,
            reason=self.reason or "",
            statistic=self.statistic,
        )


class ResetSummary(BaseModel):
    archived_count: int
    reset_month: str


class LatenessRankEntry(BaseModel):
    employee_id: str
    total_late_count: int
    total_late_minutes: int
    average_lateness: int
    punishment_triggered: bool


class MonthlySummary(BaseModel):
    year_month: str
    late_employees: int
    total_late_count: int
    total_late_minutes: int
    punishment_count: int
