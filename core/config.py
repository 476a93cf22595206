import os
import threading
from dataclasses import dataclass

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

from utils.timezone_helpers import validate_timezone

# Load environment variables from .env file, if it exists
load_dotenv()


# Working Day Boundaries, Local Time Of Day
class WorkingHours(BaseModel):
    start: str = "09:00"
    end: str = "18:00"

    @field_validator("start", "end")
    @classmethod
    def validate_hhmm(cls, value: str) -> str:
        """Accept only zero-padded 24h HH:MM strings."""
        parts = value.split(":")
        if len(parts) != 2 or not all(p.isdigit() and len(p) == 2 for p in parts):
            raise ValueError(f"Expected HH:MM, got {value!r}")
        hour, minute = int(parts[0]), int(parts[1])
        if hour > 23 or minute > 59:
            raise ValueError(f"Time of day out of range: {value!r}")
        return value


class WorkingHoursConfig:
    """Process-wide working hours that admins may change while the engine runs."""

    def __init__(self, hours: WorkingHours | None = None):
        self._hours = hours or WorkingHours()
        self._lock = threading.Lock()

    def current(self) -> WorkingHours:
        with self._lock:
            return self._hours

    def update(self, start: str, end: str) -> WorkingHours:
        hours = WorkingHours(start=start, end=end)
        with self._lock:
            self._hours = hours
        return hours


@dataclass(frozen=True)
class EngineSettings:
    timezone: str = "Asia/Taipei"
    geofence_radius_meters: float = 50.0
    late_count_threshold: int = 3
    late_minutes_threshold: int = 10
    fingerprint_history_size: int = 10
    device_difference_threshold: int = 2


def load_settings() -> EngineSettings:
    """
    Build engine settings from environment variables.

    Returns:
        EngineSettings: values from the environment, defaults otherwise
    """
    tz = os.getenv("ATTENDANCE_TIMEZONE", "Asia/Taipei")
    if not validate_timezone(tz):
        raise ValueError(f"Invalid ATTENDANCE_TIMEZONE: {tz}")

    return EngineSettings(
        timezone=tz,
        geofence_radius_meters=float(os.getenv("GEOFENCE_RADIUS_METERS", "50")),
        late_count_threshold=int(os.getenv("LATE_COUNT_THRESHOLD", "3")),
        late_minutes_threshold=int(os.getenv("LATE_MINUTES_THRESHOLD", "10")),
        fingerprint_history_size=int(os.getenv("FINGERPRINT_HISTORY_SIZE", "10")),
        device_difference_threshold=int(os.getenv("DEVICE_DIFFERENCE_THRESHOLD", "2")),
    )


def load_working_hours() -> WorkingHoursConfig:
    return WorkingHoursConfig(
        WorkingHours(
            start=os.getenv("WORK_START", "09:00"),
            end=os.getenv("WORK_END", "18:00"),
        )
    )
