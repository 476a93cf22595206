from .attendance_record import (
    AttendanceRecord,
    AttendanceStatus,
    CheckInEvent,
    CheckType,
    DeviceDescriptor,
    Location,
)
from .device_fingerprint import (
    AnomalyCheck,
    DeviceDifference,
    DeviceFingerprint,
    DeviceFingerprintRecord,
    DeviceSnapshot,
)
from .employee import Employee
from .late_statistic import MonthlyLateStatistic, PunishmentOutcome, PunishmentTrigger, ResetSummary
from .notification import NotificationPayload
from .store import Store
