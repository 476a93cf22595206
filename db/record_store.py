import threading
from datetime import datetime, timezone
from typing import List, Optional, Protocol

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from models.attendance_record import AttendanceRecord, AttendanceStatus


class RecordStore(Protocol):
    def save(self, record: AttendanceRecord) -> AttendanceRecord: ...

    def query(
        self,
        employee_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[AttendanceStatus] = None,
    ) -> List[AttendanceRecord]: ...


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands datetimes back naive; they were written as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class InMemoryRecordStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._records: List[AttendanceRecord] = []

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        with self._lock:
            record.id = len(self._records) + 1
            self._records.append(record)
        return record

    def query(self, employee_id, start=None, end=None, status=None):
        with self._lock:
            records = [r for r in self._records if r.employee_id == employee_id]

        if start is not None:
            records = [r for r in records if _as_utc(r.timestamp) >= _as_utc(start)]
        if end is not None:
            records = [r for r in records if _as_utc(r.timestamp) <= _as_utc(end)]
        if status is not None:
            records = [r for r in records if r.status == status]

        return sorted(records, key=lambda r: _as_utc(r.timestamp))


class DatabaseRecordStore:
    """Writes each accepted record in its own transaction."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        with Session(self._engine) as session:
            # Store UTC so naive read-backs stay correct
            record.timestamp = _as_utc(record.timestamp)
            session.add(record)
            session.commit()
            # Refreshes Object W/ Auto Generated Fields
            session.refresh(record)
            session.expunge(record)
        return record

    def query(self, employee_id, start=None, end=None, status=None):
        statement = select(AttendanceRecord).where(AttendanceRecord.employee_id == employee_id)
        if start is not None:
            statement = statement.where(AttendanceRecord.timestamp >= _as_utc(start))
        if end is not None:
            statement = statement.where(AttendanceRecord.timestamp <= _as_utc(end))
        if status is not None:
            statement = statement.where(AttendanceRecord.status == status)
        statement = statement.order_by(AttendanceRecord.timestamp)

        with Session(self._engine) as session:
            records = list(session.exec(statement).all())
            for record in records:
                session.expunge(record)
        return records
