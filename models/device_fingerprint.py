from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_serializer

from utils.datetime_helpers import format_utc_datetime

# Placeholder for attributes the browser did not report
UNKNOWN = "unknown"

# Compared attributes, in canonical (hashing) order
SNAPSHOT_FIELDS = ("user_agent", "screen_resolution", "timezone", "language", "platform")


class DeviceSnapshot(BaseModel):
    user_agent: str = UNKNOWN
    screen_resolution: str = UNKNOWN
    timezone: str = UNKNOWN
    language: str = UNKNOWN
    platform: str = UNKNOWN


class DeviceFingerprint(BaseModel):
    fingerprint_hash: str
    snapshot: DeviceSnapshot
    captured_at: datetime

    @property
    def short_hash(self) -> str:
        return self.fingerprint_hash[:8]


# One Entry in an Employee's Fingerprint History
class DeviceFingerprintRecord(BaseModel):
    employee_id: str
    fingerprint_hash: str
    snapshot: DeviceSnapshot
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, dt: datetime) -> str:
        result = format_utc_datetime(dt)
        return result if result is not None else dt.isoformat()


class DeviceDifference(BaseModel):
    property: str
    previous: str
    current: str


class AnomalyCheck(BaseModel):
    is_anomalous: bool
    reason: str
    differences: List[DeviceDifference] = []
    last_check_at: Optional[datetime] = None
