#!/usr/bin/env python3
"""
Tests for the SQLModel-backed directory and record store, against an
in-memory SQLite database.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from db.directory import DatabaseDirectory
from db.record_store import DatabaseRecordStore
from db.seed import seed_reference_data
from models.attendance_record import AttendanceRecord, AttendanceStatus, CheckType, DeviceDescriptor, Location

TAIPEI = timezone(timedelta(hours=8))


@pytest.fixture
def bind():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    seed_reference_data(engine)
    return engine


def make_record(employee_id, when, status=AttendanceStatus.NORMAL, minutes=0):
    return AttendanceRecord(
        employee_id=employee_id,
        store_id="1",
        check_type=CheckType.CHECK_IN,
        timestamp=when,
        latitude=25.0330,
        longitude=121.5654,
        distance_meters=3,
        fingerprint_hash="ab" * 32,
        status=status,
        minutes=minutes,
        remark="on time",
    )


def test_directory_reads_seeded_rows(bind):
    directory = DatabaseDirectory(bind)

    store = directory.get_store("1")
    assert store.name == "Taipei Main"
    assert store.radius_meters is None

    employee = directory.get_employee("3")
    assert employee.store_id == "2"

    assert directory.get_store("404") is None
    assert directory.get_employee("404") is None


def test_seeding_twice_is_idempotent(bind):
    seed_reference_data(bind)
    assert DatabaseDirectory(bind).get_store("4").name == "Kaohsiung Branch"


def test_saved_record_gets_id_and_round_trips_as_utc(bind):
    store = DatabaseRecordStore(bind)
    when = datetime(2026, 3, 2, 9, 5, tzinfo=TAIPEI)

    saved = store.save(make_record("1", when, AttendanceStatus.LATE, 5))

    assert saved.id is not None
    rows = store.query("1")
    assert len(rows) == 1
    assert rows[0].status == AttendanceStatus.LATE
    assert rows[0].model_dump()["timestamp"] == "2026-03-02T01:05:00Z"


def test_query_filters(bind):
    store = DatabaseRecordStore(bind)
    store.save(make_record("1", datetime(2026, 3, 2, 1, 0, tzinfo=timezone.utc)))
    store.save(make_record("1", datetime(2026, 3, 3, 1, 20, tzinfo=timezone.utc), AttendanceStatus.LATE, 20))
    store.save(make_record("1", datetime(2026, 3, 4, 1, 0, tzinfo=timezone.utc), AttendanceStatus.ANOMALOUS))
    store.save(make_record("2", datetime(2026, 3, 3, 1, 0, tzinfo=timezone.utc)))

    assert len(store.query("1")) == 3
    assert len(store.query("1", start=datetime(2026, 3, 3, tzinfo=timezone.utc))) == 2
    assert len(store.query("1", end=datetime(2026, 3, 3, 12, tzinfo=timezone.utc))) == 2
    assert [r.minutes for r in store.query("1", status=AttendanceStatus.LATE)] == [20]

    ordered = store.query("1")
    assert [r.timestamp.day for r in ordered] == [2, 3, 4]


def test_database_backed_service_end_to_end(bind):
    from core.clock import FrozenClock
    from main import create_attendance_service

    service = create_attendance_service(bind)
    service.clock = FrozenClock(datetime(2026, 3, 2, 1, 12, tzinfo=timezone.utc))
    service.late_statistics.clock = service.clock

    result = service.perform_check_in(
        "2",
        CheckType.CHECK_IN,
        Location(latitude=25.0330, longitude=121.5654),
        DeviceDescriptor(user_agent="Mozilla/5.0", platform="Linux armv8l"),
    )

    assert result.success
    assert result.record.id is not None
    stored = service.get_attendance_records("2")
    assert len(stored) == 1
    assert stored[0].status == result.record.status
