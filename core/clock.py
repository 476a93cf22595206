from datetime import datetime, timedelta, timezone


class SystemClock:
    """Wall clock, always UTC and timezone-aware."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock:
    """Clock pinned to a fixed instant; tests move it explicitly."""

    def __init__(self, frozen_at: datetime):
        self._now = self._aware(frozen_at)

    @staticmethod
    def _aware(dt: datetime) -> datetime:
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt

    def now(self) -> datetime:
        return self._now

    def set(self, dt: datetime) -> None:
        self._now = self._aware(dt)

    def advance(self, **kwargs) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now
