import asyncio
import logging
from datetime import datetime
from typing import Optional

from models.late_statistic import ResetSummary
from services.late_statistics_service import LateStatisticsAggregator
from utils.timezone_helpers import start_of_next_month

logger = logging.getLogger(__name__)


def _process_once(aggregator: LateStatisticsAggregator, as_of: Optional[datetime] = None) -> ResetSummary:
    """Blocking reset for a single month rollover (run off the event loop)."""
    summary = aggregator.reset_monthly(as_of=as_of)
    logger.info(
        f"[MONTHLY_RESET] archived={summary.archived_count} reset_month={summary.reset_month}"
    )
    return summary


async def run_monthly_reset_once_async(
    aggregator: LateStatisticsAggregator,
    as_of: Optional[datetime] = None,
) -> ResetSummary:
    """Async wrapper to run a single reset off the event loop."""
    return await asyncio.to_thread(_process_once, aggregator, as_of)


def seconds_until_next_month(now: datetime, tz: str) -> float:
    """Seconds from now until local midnight on the 1st of next month."""
    return max(0.0, (start_of_next_month(now, tz) - now).total_seconds())


async def run_monthly_reset_loop(
    aggregator: LateStatisticsAggregator,
    iterations: Optional[int] = None,
) -> None:
    """
    Sleep until each month boundary, then reset. Runs forever unless
    `iterations` caps the number of resets.
    """
    done = 0
    boundary: Optional[datetime] = None
    while iterations is None or done < iterations:
        now = aggregator.clock.now()
        # After an early wake-up, now is still before the boundary just handled
        anchor = now if boundary is None or now > boundary else boundary
        boundary = start_of_next_month(anchor, aggregator.tz)
        delay = max(0.0, (boundary - now).total_seconds())
        logger.info(f"[MONTHLY_RESET] next reset in {delay:.0f}s")
        await asyncio.sleep(delay)
        # Timers can fire a little early; reset for the boundary, not the wake-up time
        await run_monthly_reset_once_async(aggregator, as_of=boundary)
        done += 1
