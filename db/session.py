from sqlmodel import create_engine, Session, SQLModel
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Connects the engine's persistence adapter to a database.
# SQLite by default; point DATABASE_URL at PostgreSQL in production.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./attendance.db")

# SQLite connections are handed between worker threads
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Note: echo=True will log all SQL statements, set to False in production
engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def create_db_and_tables(bind=None):
    # Register table models on the metadata before create_all
    import models.attendance_record  # noqa: F401
    import models.employee  # noqa: F401
    import models.store  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


# Getter for a Session, usable as a generator dependency
def get_session():
    with Session(engine) as session:
        try:
            yield session
        finally:
            session.close()
