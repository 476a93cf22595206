import logging
import os

from dotenv import load_dotenv

from core.clock import SystemClock
from core.config import load_settings, load_working_hours
from db.directory import DatabaseDirectory
from db.record_store import DatabaseRecordStore
from db.session import create_db_and_tables, engine
from services.attendance_service import AttendanceService

# This file wires the engine to its collaborators

# Load environment variables from .env file, if it exists
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)


def create_attendance_service(bind=None) -> AttendanceService:
    """Engine backed by the configured database for reference data and records."""
    bind = bind or engine
    create_db_and_tables(bind)

    return AttendanceService(
        directory=DatabaseDirectory(bind),
        record_store=DatabaseRecordStore(bind),
        clock=SystemClock(),
        settings=load_settings(),
        working_hours=load_working_hours(),
    )
