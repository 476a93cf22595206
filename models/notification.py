from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_serializer

from models.attendance_record import AttendanceStatus, CheckType
from models.device_fingerprint import DeviceDifference
from utils.datetime_helpers import format_utc_datetime


# Structured Fields for the Notification Dispatcher; No Message Text Here
class NotificationPayload(BaseModel):
    employee_id: str
    employee_name: str
    store_id: str
    store_name: str
    check_type: CheckType
    check_time: datetime
    latitude: float
    longitude: float
    distance_meters: int
    status: AttendanceStatus
    minutes: int
    user_agent: str
    platform: str
    fingerprint_prefix: str
    is_anomalous: bool
    anomaly_reason: Optional[str] = None
    device_differences: List[DeviceDifference] = []
    previous_check_at: Optional[datetime] = None
    # Running monthly totals, present once the employee was late this month
    monthly_late_count: Optional[int] = None
    monthly_late_minutes: Optional[int] = None
    punishment_triggered: bool = False

    @field_serializer("check_time", "previous_check_at")
    def serialize_datetimes(self, dt: Optional[datetime]) -> Optional[str]:
        return format_utc_datetime(dt)
