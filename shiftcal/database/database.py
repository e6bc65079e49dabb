# shiftcal/database/database.py
"""
SQLAlchemy database setup and models.

Columns mirror the flat records from shiftcal.core.records: epoch
milliseconds for dates and timestamps, 1/0 integers for booleans.
"""

from sqlalchemy import JSON, BigInteger, Column, Float, Integer, String, Text, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from shiftcal.core.config import DATABASE_URL


def _connect_args(url: str) -> dict:
    # SQLite-anslutningar delas mellan trådar i FastAPI
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


engine = create_engine(DATABASE_URL, connect_args=_connect_args(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


class ShiftPatternRow(Base):
    """Stored shift pattern."""

    __tablename__ = "shift_patterns"

    id = Column(String(36), primary_key=True)
    name = Column(String(100), nullable=False)
    cycle = Column(JSON, nullable=False)  # ["day", "day", "night", ...]
    start_date = Column(BigInteger, nullable=False)
    is_active = Column(Integer, default=1, nullable=False)  # 1=True, 0=False
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=True)

    def __repr__(self):
        return f"<ShiftPatternRow(id={self.id}, name={self.name})>"


class ShiftAlarmRow(Base):
    """
    Stored shift alarm.

    pattern_id is a plain column, not a foreign key: alarms may outlive a
    deleted pattern in imported data and are then reported as orphans.
    """

    __tablename__ = "shift_alarms"

    id = Column(String(36), primary_key=True)
    pattern_id = Column(String(36), nullable=False, index=True)
    alarm_type = Column(String(16), nullable=False)
    target_shift_types = Column(String(64), nullable=False)  # "day,night"
    time_hour = Column(Integer, nullable=False)
    time_minute = Column(Integer, nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, default="", nullable=False)
    is_active = Column(Integer, default=1, nullable=False)
    created_at = Column(BigInteger, nullable=False)

    settings_vibration = Column(Integer, default=1, nullable=False)
    settings_sound = Column(Integer, default=1, nullable=False)
    settings_tone = Column(String(64), nullable=False)
    settings_volume = Column(Float, nullable=False)
    settings_snooze = Column(Integer, default=1, nullable=False)
    settings_snooze_duration = Column(Integer, nullable=False)
    settings_max_snooze_count = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<ShiftAlarmRow(id={self.id}, pattern_id={self.pattern_id}, type={self.alarm_type})>"


class BasicAlarmRow(Base):
    """Stored basic alarm."""

    __tablename__ = "basic_alarms"

    id = Column(String(128), primary_key=True)  # cykelgenererade id:n är långa
    label = Column(String(200), nullable=False)
    time_hour = Column(Integer, nullable=False)
    time_minute = Column(Integer, nullable=False)
    repeat_days = Column(String(32), default="", nullable=False)  # "1,3,5"
    is_active = Column(Integer, default=1, nullable=False)
    tone = Column(String(64), nullable=False)
    volume = Column(Float, nullable=False)
    created_at = Column(BigInteger, nullable=False)
    alarm_type = Column(String(16), default="basic", nullable=False)
    scheduled_date = Column(BigInteger, nullable=True)

    def __repr__(self):
        return f"<BasicAlarmRow(id={self.id}, label={self.label})>"


class AppState(Base):
    """Key/value application state, e.g. the active pattern id."""

    __tablename__ = "app_state"

    key = Column(String(64), primary_key=True)
    value = Column(String(255), nullable=True)


def create_tables():
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
