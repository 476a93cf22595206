import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from core.clock import SystemClock
from core.config import EngineSettings, WorkingHoursConfig
from core.errors import GEOFENCE_VIOLATION, AttendanceError, AttendanceSystemError, EmployeeNotFound
from core.locks import KeyedLock
from db.directory import Directory
from db.record_store import InMemoryRecordStore, RecordStore
from models.attendance_record import (
    AttendanceRecord,
    AttendanceStatus,
    CheckInEvent,
    CheckType,
    DeviceDescriptor,
    Location,
)
from models.device_fingerprint import AnomalyCheck
from models.late_statistic import PunishmentOutcome, PunishmentTrigger
from models.notification import NotificationPayload
from services.fingerprint_service import DeviceFingerprintAnalyzer
from services.geofence_service import GeofenceResult, GeofenceValidator
from services.late_statistics_service import LateStatisticsAggregator
from services.status_classifier import StatusClassifier

logger = logging.getLogger(__name__)


class CheckInOutcome(str, Enum):
    RECORDED = "recorded"
    REJECTED = "rejected"


@dataclass(frozen=True)
class CheckInResult:
    outcome: CheckInOutcome
    message: str
    geofence: GeofenceResult
    code: Optional[str] = None
    record: Optional[AttendanceRecord] = None
    anomaly: Optional[AnomalyCheck] = None
    punishment: Optional[PunishmentOutcome] = None
    notification: Optional[NotificationPayload] = None

    @property
    def success(self) -> bool:
        return self.outcome == CheckInOutcome.RECORDED

    @property
    def punishment_trigger(self) -> Optional[PunishmentTrigger]:
        """Event for the promotion/voting subsystem, only on a first crossing."""
        if self.punishment is None:
            return None
        return self.punishment.as_trigger()


class AttendanceService:
    """
    Runs one check-in / check-out end to end.

    Steps, stopping at the first failure:
        1. resolve the employee
        2. geofence gate against the employee's store
        3. device fingerprint + anomaly check
        4. status classification against working hours
        5. monthly lateness escalation for late check-ins
        6. anomalous devices force status ANOMALOUS
        7. persist the record and hand back record, escalation and notification data

    Nothing is mutated for a rejected event. Steps 3-7 run under a
    per-employee lock so fingerprint history and monthly counters can't lose
    updates when one employee double-submits.
    """

    def __init__(
        self,
        directory: Directory,
        record_store: Optional[RecordStore] = None,
        clock=None,
        settings: Optional[EngineSettings] = None,
        working_hours: Optional[WorkingHoursConfig] = None,
        late_statistics: Optional[LateStatisticsAggregator] = None,
        fingerprints: Optional[DeviceFingerprintAnalyzer] = None,
    ):
        settings = settings or EngineSettings()
        self.settings = settings
        self.directory = directory
        self.clock = clock or SystemClock()
        self.working_hours = working_hours or WorkingHoursConfig()
        self.record_store = record_store if record_store is not None else InMemoryRecordStore()

        self.geofence = GeofenceValidator(directory, settings.geofence_radius_meters)
        self.fingerprints = fingerprints or DeviceFingerprintAnalyzer(
            history_size=settings.fingerprint_history_size,
            difference_threshold=settings.device_difference_threshold,
        )
        self.classifier = StatusClassifier(settings.timezone)
        self.late_statistics = late_statistics or LateStatisticsAggregator(
            clock=self.clock,
            tz=settings.timezone,
            count_threshold=settings.late_count_threshold,
            minutes_threshold=settings.late_minutes_threshold,
        )
        self._employee_locks = KeyedLock()

    def handle_event(self, event: CheckInEvent) -> CheckInResult:
        return self.perform_check_in(
            event.employee_id,
            event.check_type,
            event.location,
            event.device,
            check_time=event.timestamp,
        )

    def perform_check_in(
        self,
        employee_id: str,
        check_type: CheckType,
        location: Location,
        device: DeviceDescriptor,
        check_time: Optional[datetime] = None,
    ) -> CheckInResult:
        logger.info(f"Employee {employee_id} submitting {check_type.value}")

        try:
            # 1) Resolve Employee
            employee = self.directory.get_employee(employee_id)
            if employee is None:
                raise EmployeeNotFound(employee_id)

            # 2) Geofence Gate; Raises StoreNotFound For Bad Reference Data
            geo = self.geofence.validate(employee.store_id, location.latitude, location.longitude)
        except AttendanceError:
            raise
        except Exception as e:
            logger.exception(f"Reference lookup failed for employee {employee_id}")
            raise AttendanceSystemError(f"Reference data could not be read: {e}") from e

        if not geo.valid:
            logger.warning(f"Rejected {check_type.value} for employee {employee_id}: {geo.reason}")
            return CheckInResult(
                outcome=CheckInOutcome.REJECTED,
                code=GEOFENCE_VIOLATION,
                message=f"Location check failed: {geo.reason}",
                geofence=geo,
            )

        with self._employee_locks.hold(employee_id):
            try:
                # Capture the time once so hash, status and month bucket agree
                now = check_time or self.clock.now()

                # 3) Fingerprint + Anomaly Check
                fingerprint = self.fingerprints.generate_fingerprint(device, now)
                anomaly = self.fingerprints.detect_anomaly(employee_id, fingerprint)

                # 4) Status Classification
                classification = self.classifier.classify(now, check_type, self.working_hours.current())

                # 6) Anomaly Overrides Status; Minutes Kept For Reporting
                status = classification.status
                remark = classification.remark
                if anomaly.is_anomalous:
                    status = AttendanceStatus.ANOMALOUS
                    remark = f"{remark} (device anomaly: {anomaly.reason})"

                record = AttendanceRecord(
                    employee_id=employee_id,
                    store_id=geo.store_id,
                    check_type=check_type,
                    timestamp=now,
                    latitude=location.latitude,
                    longitude=location.longitude,
                    distance_meters=geo.distance_meters,
                    fingerprint_hash=fingerprint.fingerprint_hash,
                    status=status,
                    minutes=classification.minutes,
                    remark=remark,
                    is_anomalous=anomaly.is_anomalous,
                    anomaly_reason=anomaly.reason if anomaly.is_anomalous else None,
                )

                # 7) Persist First; A Failed Write Leaves Counters And History Untouched
                record = self.record_store.save(record)

                # 5) Escalation For Late Check-Ins
                punishment = PunishmentOutcome(punishment_triggered=False)
                if check_type == CheckType.CHECK_IN and classification.minutes > 0:
                    punishment = self.late_statistics.update_monthly(employee_id, classification.minutes)

                self.fingerprints.record(employee_id, fingerprint)
            except AttendanceError:
                raise
            except Exception as e:
                # A failure past save() leaves the record stored; callers get a typed error either way
                logger.exception(f"Check-in failed for employee {employee_id}")
                raise AttendanceSystemError(f"Check-in could not be processed: {e}") from e

        notification = NotificationPayload(
            employee_id=employee_id,
            employee_name=employee.name,
            store_id=geo.store_id,
            store_name=geo.store_name,
            check_type=check_type,
            check_time=now,
            latitude=location.latitude,
            longitude=location.longitude,
            distance_meters=geo.distance_meters,
            status=status,
            minutes=classification.minutes,
            user_agent=fingerprint.snapshot.user_agent,
            platform=fingerprint.snapshot.platform,
            fingerprint_prefix=fingerprint.short_hash,
            is_anomalous=anomaly.is_anomalous,
            anomaly_reason=anomaly.reason if anomaly.is_anomalous else None,
            device_differences=anomaly.differences,
            previous_check_at=anomaly.last_check_at,
            monthly_late_count=punishment.statistic.total_late_count if punishment.statistic else None,
            monthly_late_minutes=punishment.statistic.total_late_minutes if punishment.statistic else None,
            punishment_triggered=punishment.punishment_triggered,
        )

        logger.info(f"Recorded {check_type.value} for {employee.name}: {status.value}")

        return CheckInResult(
            outcome=CheckInOutcome.RECORDED,
            message=f"{check_type.value} recorded",
            geofence=geo,
            record=record,
            anomaly=anomaly,
            punishment=punishment,
            notification=notification,
        )

    def get_attendance_records(
        self,
        employee_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> List[AttendanceRecord]:
        return self.record_store.query(employee_id, start=start, end=end, status=status)

    def update_working_hours(self, start: str, end: str):
        hours = self.working_hours.update(start, end)
        logger.info(f"Working hours changed to {hours.start}-{hours.end}")
        return hours
