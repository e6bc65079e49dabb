# shiftcal/database/repository.py
"""
Persistence of patterns, alarms and the active pattern.

ShiftRepository converts between domain models and table rows through the
flat record codec, so the database holds exactly what an export file holds.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shiftcal.core.models import BasicAlarm, ShiftAlarm, ShiftPattern
from shiftcal.core.records import (
    RecordError,
    basic_alarm_from_record,
    basic_alarm_to_record,
    datetime_to_millis,
    pattern_from_record,
    pattern_to_record,
    shift_alarm_from_record,
    shift_alarm_to_record,
)
from shiftcal.core.types import ExportData, StorageStats
from shiftcal.core.utils import utc_now
from shiftcal.database.database import AppState, BasicAlarmRow, ShiftAlarmRow, ShiftPatternRow

logger = logging.getLogger(__name__)

ACTIVE_PATTERN_KEY = "active_pattern_id"


def _row_to_record(row) -> dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


def _ensure_unique_ids(items: Iterable[ShiftPattern | ShiftAlarm | BasicAlarm], kind: str) -> None:
    counts = Counter(item.id for item in items)
    duplicates = sorted(item_id for item_id, count in counts.items() if count > 1)
    if duplicates:
        raise RecordError(f"Duplicate {kind} ids in import: {duplicates}")


def _record_to_row(model, record: Mapping[str, Any]):
    # Bara kolumner som finns i tabellen, äldre exporter kan ha extra nycklar
    columns = {column.name for column in model.__table__.columns}
    return model(**{key: value for key, value in record.items() if key in columns})


class ShiftRepository:
    """
    Repository over one SQLAlchemy session.

    Every write commits. Deleting a pattern removes its shift alarms and
    clears the active selection if it pointed at the pattern.
    """

    def __init__(self, db: Session):
        self.db = db

    # === Patterns ===

    def save_pattern(self, pattern: ShiftPattern) -> ShiftPattern:
        self.db.merge(_record_to_row(ShiftPatternRow, pattern_to_record(pattern)))
        self.db.commit()
        logger.debug("Saved pattern %s", pattern.id)
        return pattern

    def get_pattern(self, pattern_id: str) -> ShiftPattern | None:
        row = self.db.query(ShiftPatternRow).filter(ShiftPatternRow.id == pattern_id).first()
        return pattern_from_record(_row_to_record(row)) if row else None

    def list_patterns(self) -> list[ShiftPattern]:
        rows = self.db.query(ShiftPatternRow).order_by(ShiftPatternRow.created_at, ShiftPatternRow.id).all()
        return [pattern_from_record(_row_to_record(row)) for row in rows]

    def delete_pattern(self, pattern_id: str) -> bool:
        """
        Delete a pattern together with its shift alarms.

        Returns:
            True if the pattern existed
        """
        deleted = self.db.query(ShiftPatternRow).filter(ShiftPatternRow.id == pattern_id).delete()
        alarms = self.db.query(ShiftAlarmRow).filter(ShiftAlarmRow.pattern_id == pattern_id).delete()

        state = self.db.query(AppState).filter(AppState.key == ACTIVE_PATTERN_KEY).first()
        if state and state.value == pattern_id:
            self.db.delete(state)

        self.db.commit()
        if deleted:
            logger.info("Deleted pattern %s and %d alarms", pattern_id, alarms)
        return bool(deleted)

    # === Active pattern ===

    def get_active_pattern_id(self) -> str | None:
        state = self.db.query(AppState).filter(AppState.key == ACTIVE_PATTERN_KEY).first()
        return state.value if state else None

    def set_active_pattern(self, pattern_id: str | None) -> None:
        """Select the active pattern, or clear the selection with None."""
        state = self.db.query(AppState).filter(AppState.key == ACTIVE_PATTERN_KEY).first()
        if pattern_id is None:
            if state:
                self.db.delete(state)
        elif state:
            state.value = pattern_id
        else:
            self.db.add(AppState(key=ACTIVE_PATTERN_KEY, value=pattern_id))
        self.db.commit()

    def get_active_pattern(self) -> ShiftPattern | None:
        active_id = self.get_active_pattern_id()
        if active_id is None:
            return None
        return self.get_pattern(active_id)

    # === Shift alarms ===

    def save_alarm(self, alarm: ShiftAlarm) -> ShiftAlarm:
        self.db.merge(_record_to_row(ShiftAlarmRow, shift_alarm_to_record(alarm)))
        self.db.commit()
        return alarm

    def get_alarm(self, alarm_id: str) -> ShiftAlarm | None:
        row = self.db.query(ShiftAlarmRow).filter(ShiftAlarmRow.id == alarm_id).first()
        return shift_alarm_from_record(_row_to_record(row)) if row else None

    def list_alarms(self, pattern_id: str | None = None) -> list[ShiftAlarm]:
        query = self.db.query(ShiftAlarmRow)
        if pattern_id is not None:
            query = query.filter(ShiftAlarmRow.pattern_id == pattern_id)
        rows = query.order_by(ShiftAlarmRow.created_at, ShiftAlarmRow.id).all()
        return [shift_alarm_from_record(_row_to_record(row)) for row in rows]

    def delete_alarm(self, alarm_id: str) -> bool:
        deleted = self.db.query(ShiftAlarmRow).filter(ShiftAlarmRow.id == alarm_id).delete()
        self.db.commit()
        return bool(deleted)

    # === Basic alarms ===

    def save_basic_alarm(self, alarm: BasicAlarm) -> BasicAlarm:
        self.db.merge(_record_to_row(BasicAlarmRow, basic_alarm_to_record(alarm)))
        self.db.commit()
        return alarm

    def get_basic_alarm(self, alarm_id: str) -> BasicAlarm | None:
        row = self.db.query(BasicAlarmRow).filter(BasicAlarmRow.id == alarm_id).first()
        return basic_alarm_from_record(_row_to_record(row)) if row else None

    def list_basic_alarms(self) -> list[BasicAlarm]:
        rows = self.db.query(BasicAlarmRow).order_by(BasicAlarmRow.created_at, BasicAlarmRow.id).all()
        return [basic_alarm_from_record(_row_to_record(row)) for row in rows]

    def delete_basic_alarm(self, alarm_id: str) -> bool:
        deleted = self.db.query(BasicAlarmRow).filter(BasicAlarmRow.id == alarm_id).delete()
        self.db.commit()
        return bool(deleted)

    # === Whole store ===

    def get_storage_stats(self) -> StorageStats:
        patterns = self.list_patterns()
        alarms = self.list_alarms()
        basic_alarms = self.list_basic_alarms()
        return {
            "total_patterns": len(patterns),
            "active_patterns": sum(1 for p in patterns if p.is_active),
            "total_alarms": len(alarms),
            "active_alarms": sum(1 for a in alarms if a.is_active),
            "total_basic_alarms": len(basic_alarms),
            "active_basic_alarms": sum(1 for a in basic_alarms if a.is_active),
        }

    def clear_all_data(self) -> None:
        self.db.query(ShiftAlarmRow).delete()
        self.db.query(BasicAlarmRow).delete()
        self.db.query(ShiftPatternRow).delete()
        self.db.query(AppState).delete()
        self.db.commit()
        logger.warning("Cleared all stored data")

    def export_data(self) -> ExportData:
        return {
            "patterns": [pattern_to_record(p) for p in self.list_patterns()],
            "alarms": [shift_alarm_to_record(a) for a in self.list_alarms()],
            "basic_alarms": [basic_alarm_to_record(a) for a in self.list_basic_alarms()],
            "active_pattern_id": self.get_active_pattern_id(),
            "export_timestamp": datetime_to_millis(utc_now()),
        }

    def import_data(self, data: Mapping[str, Any]) -> StorageStats:
        """
        Replace stored data with an export.

        Each entity list present in ``data`` replaces the stored list; absent
        lists are left alone. All records are decoded before anything is
        written, so a broken record leaves the store untouched.

        Returns:
            Storage stats after the import

        Raises:
            RecordError: If any record cannot be decoded or an id repeats
        """
        patterns = [pattern_from_record(r) for r in data["patterns"]] if "patterns" in data else None
        alarms = [shift_alarm_from_record(r) for r in data["alarms"]] if "alarms" in data else None
        basic_alarms = (
            [basic_alarm_from_record(r) for r in data["basic_alarms"]] if "basic_alarms" in data else None
        )
        for items, kind in ((patterns, "pattern"), (alarms, "alarm"), (basic_alarms, "basic alarm")):
            if items is not None:
                _ensure_unique_ids(items, kind)

        try:
            if patterns is not None:
                self.db.query(ShiftPatternRow).delete()
                for pattern in patterns:
                    self.db.add(_record_to_row(ShiftPatternRow, pattern_to_record(pattern)))
            if alarms is not None:
                self.db.query(ShiftAlarmRow).delete()
                for alarm in alarms:
                    self.db.add(_record_to_row(ShiftAlarmRow, shift_alarm_to_record(alarm)))
            if basic_alarms is not None:
                self.db.query(BasicAlarmRow).delete()
                for basic_alarm in basic_alarms:
                    self.db.add(_record_to_row(BasicAlarmRow, basic_alarm_to_record(basic_alarm)))
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.exception("Import violated a database constraint, rolled back")
            raise RecordError(f"Import rejected by the database: {e.orig}") from e
        except Exception:
            self.db.rollback()
            logger.exception("Import failed, rolled back")
            raise

        active_id = data.get("active_pattern_id")
        if active_id is not None:
            self.set_active_pattern(active_id)

        stats = self.get_storage_stats()
        logger.info("Imported data: %s", stats)
        return stats
