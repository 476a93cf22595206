from datetime import datetime

from pydantic import BaseModel

from core.config import WorkingHours
from models.attendance_record import AttendanceStatus, CheckType
from utils.datetime_helpers import round_minutes
from utils.timezone_helpers import from_utc_to_local, local_time_on_same_day


class Classification(BaseModel):
    status: AttendanceStatus
    minutes: int
    remark: str
    local_time: str  # HH:MM the decision was made on


class StatusClassifier:
    """
    Classifies a check instant against working hours in the stores' timezone.

    Lateness is decided on the HH:MM of the local time, so a check-in at
    09:00:59 against a 09:00 start is still on time. Minute deltas are measured
    from the exact instant and rounded half up.
    """

    def __init__(self, tz: str = "Asia/Taipei"):
        self.tz = tz

    def classify(self, check_time: datetime, check_type: CheckType, working_hours: WorkingHours) -> Classification:
        local = from_utc_to_local(check_time, self.tz)
        time_of_day = local.strftime("%H:%M")

        if check_type == CheckType.CHECK_IN:
            # Zero-padded HH:MM strings order the same as the times they name
            if time_of_day > working_hours.start:
                work_start = local_time_on_same_day(local, working_hours.start)
                minutes = round_minutes((local - work_start).total_seconds())
                return Classification(
                    status=AttendanceStatus.LATE,
                    minutes=minutes,
                    remark=f"late {minutes} minutes",
                    local_time=time_of_day,
                )
            return Classification(
                status=AttendanceStatus.NORMAL, minutes=0, remark="on time", local_time=time_of_day
            )

        if time_of_day < working_hours.end:
            work_end = local_time_on_same_day(local, working_hours.end)
            minutes = round_minutes((work_end - local).total_seconds())
            # Under 30 seconds short still counts as early leave but rounds to 0
            remark = f"left early {minutes} minutes" if minutes else "left early less than 1 minute"
            return Classification(
                status=AttendanceStatus.EARLY_LEAVE,
                minutes=minutes,
                remark=remark,
                local_time=time_of_day,
            )
        return Classification(
            status=AttendanceStatus.NORMAL, minutes=0, remark="normal check-out", local_time=time_of_day
        )
