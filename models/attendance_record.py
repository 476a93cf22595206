from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field as PydanticField, field_serializer
from sqlmodel import Field, Index, SQLModel

from utils.datetime_helpers import format_utc_datetime


# Enum Limiting Check Type to Just Two Vals
class CheckType(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class AttendanceStatus(str, Enum):
    NORMAL = "normal"
    LATE = "late"
    EARLY_LEAVE = "early_leave"
    ANOMALOUS = "anomalous"


class Location(BaseModel):
    latitude: float = PydanticField(..., ge=-90, le=90)
    longitude: float = PydanticField(..., ge=-180, le=180)


# Browser-Reported Device Attributes; Any of Them May Be Missing
class DeviceDescriptor(BaseModel):
    user_agent: Optional[str] = None
    screen_resolution: Optional[str] = None
    timezone: Optional[str] = None
    language: Optional[str] = None
    platform: Optional[str] = None


# Defines the Structure of Data for a Check In / Check Out Call
class CheckInEvent(BaseModel):
    employee_id: str
    check_type: CheckType
    location: Location
    device: DeviceDescriptor = PydanticField(default_factory=DeviceDescriptor)
    # Omitted -> the engine clock decides
    timestamp: Optional[datetime] = None


# Defines a Table "attendance_record"; Written Once Per Accepted Event
class AttendanceRecord(SQLModel, table=True):
    __tablename__ = "attendance_record"

    __table_args__ = (
        Index("ix_attendance_record_employee_id", "employee_id"),
        Index("ix_attendance_record_timestamp", "timestamp"),
        # History lookups filter by employee then time range
        Index("ix_attendance_record_employee_id_timestamp", "employee_id", "timestamp"),
        Index("ix_attendance_record_status", "status"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: str
    store_id: str
    check_type: CheckType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    latitude: float
    longitude: float
    distance_meters: int = Field(ge=0)
    fingerprint_hash: str
    status: AttendanceStatus
    # Late minutes for check-ins, early-leave minutes for check-outs
    minutes: int = Field(default=0, ge=0)
    remark: str = Field(default="")
    is_anomalous: bool = Field(default=False)
    anomaly_reason: Optional[str] = Field(default=None)

    @field_serializer("timestamp")
    def serialize_timestamp(self, dt: datetime) -> str:
        """Ensure timestamp is formatted as UTC with Z suffix"""
        result = format_utc_datetime(dt)
        return result if result is not None else dt.isoformat()
