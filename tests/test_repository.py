"""
Tests for ShiftRepository and JSON backup files.
"""

import datetime
import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from shiftcal.core.models import AlarmType, BasicAlarm, ShiftType
from shiftcal.core.records import RecordError
from shiftcal.core.schedule import create_default_alarms
from shiftcal.core.storage import StorageError, export_to_file, load_from_file, validate_export_data


@pytest.fixture
def stored(repo, reference_pattern, three_day_pattern):
    """Two patterns with default alarms, one basic alarm, reference active."""
    repo.save_pattern(reference_pattern)
    repo.save_pattern(three_day_pattern)
    for alarm in create_default_alarms(reference_pattern.id) + create_default_alarms(three_day_pattern.id):
        repo.save_alarm(alarm)
    repo.save_basic_alarm(
        BasicAlarm(id="gym", label="Gym", time=datetime.time(6, 15), repeat_days=frozenset({1, 3}))
    )
    repo.set_active_pattern(reference_pattern.id)
    return repo


class TestPatterns:
    def test_save_and_get(self, repo, reference_pattern):
        repo.save_pattern(reference_pattern)
        assert repo.get_pattern("reference") == reference_pattern

    def test_missing_pattern(self, repo):
        assert repo.get_pattern("missing") is None

    def test_save_replaces(self, repo, reference_pattern):
        repo.save_pattern(reference_pattern)
        repo.save_pattern(reference_pattern.copy_with(name="Renamed"))

        assert [p.name for p in repo.list_patterns()] == ["Renamed"]

    def test_delete_cascades_to_alarms(self, stored):
        assert stored.delete_pattern("reference")

        assert stored.get_pattern("reference") is None
        assert stored.list_alarms("reference") == []
        assert len(stored.list_alarms("three-day")) == 3, "Other patterns keep their alarms"

    def test_delete_clears_active_pattern(self, stored):
        stored.delete_pattern("reference")

        assert stored.get_active_pattern_id() is None
        assert stored.get_active_pattern() is None

    def test_delete_missing_returns_false(self, repo):
        assert not repo.delete_pattern("missing")


class TestActivePattern:
    def test_set_and_clear(self, stored):
        assert stored.get_active_pattern().id == "reference"

        stored.set_active_pattern("three-day")
        assert stored.get_active_pattern_id() == "three-day"

        stored.set_active_pattern(None)
        assert stored.get_active_pattern_id() is None


class TestAlarms:
    def test_list_by_pattern(self, stored):
        alarms = stored.list_alarms("reference")

        assert len(alarms) == 3
        assert {a.alarm_type for a in alarms} == {AlarmType.DAY, AlarmType.NIGHT, AlarmType.OFF}
        assert len(stored.list_alarms()) == 6

    def test_update_round_trip(self, stored):
        alarm = stored.list_alarms("reference")[0]
        updated = alarm.copy_with(is_active=False, target_shift_types=frozenset({ShiftType.DAY, ShiftType.OFF}))

        stored.save_alarm(updated)

        assert stored.get_alarm(alarm.id) == updated

    def test_delete(self, stored):
        alarm = stored.list_alarms("reference")[0]

        assert stored.delete_alarm(alarm.id)
        assert stored.get_alarm(alarm.id) is None
        assert not stored.delete_alarm(alarm.id)

    def test_basic_alarm_crud(self, stored):
        assert stored.get_basic_alarm("gym").repeat_days == frozenset({1, 3})

        stored.save_basic_alarm(stored.get_basic_alarm("gym").copy_with(label="Run"))
        assert [a.label for a in stored.list_basic_alarms()] == ["Run"]

        assert stored.delete_basic_alarm("gym")
        assert stored.list_basic_alarms() == []


class TestWholeStore:
    def test_stats(self, stored):
        stored.save_alarm(stored.list_alarms("reference")[0].copy_with(is_active=False))

        stats = stored.get_storage_stats()

        assert stats["total_patterns"] == 2
        assert stats["active_patterns"] == 2
        assert stats["total_alarms"] == 6
        assert stats["active_alarms"] == 5
        assert stats["total_basic_alarms"] == 1

    def test_clear_all(self, stored):
        stored.clear_all_data()

        assert stored.get_storage_stats()["total_patterns"] == 0
        assert stored.list_basic_alarms() == []
        assert stored.get_active_pattern_id() is None

    def test_export_import_round_trip(self, stored):
        exported = stored.export_data()
        patterns = stored.list_patterns()
        alarms = stored.list_alarms()

        stored.clear_all_data()
        stats = stored.import_data(exported)

        assert stats["total_patterns"] == 2
        assert stored.list_patterns() == patterns
        assert stored.list_alarms() == alarms
        assert stored.get_active_pattern_id() == "reference"

    def test_import_replaces_only_present_lists(self, stored):
        stored.import_data({"basic_alarms": []})

        assert stored.list_basic_alarms() == []
        assert len(stored.list_patterns()) == 2, "Lists absent from the import are left alone"

    def test_broken_import_leaves_store_untouched(self, stored):
        exported = stored.export_data()
        del exported["alarms"][-1]["time_hour"]
        before = stored.export_data()

        with pytest.raises(RecordError):
            stored.import_data({"patterns": [], "alarms": exported["alarms"]})

        after = stored.export_data()
        assert after["patterns"] == before["patterns"]
        assert after["alarms"] == before["alarms"]

    @pytest.mark.parametrize("section", ["patterns", "alarms", "basic_alarms"])
    def test_duplicate_ids_rejected(self, stored, section):
        before = stored.export_data()
        records = before[section] + [dict(before[section][0])]

        with pytest.raises(RecordError, match="Duplicate"):
            stored.import_data({section: records})

        assert stored.export_data()[section] == before[section], "Store must be unchanged"

    def test_constraint_violation_becomes_record_error(self, stored):
        before = stored.export_data()
        records = before["alarms"] + [dict(before["alarms"][0])]

        with patch("shiftcal.database.repository._ensure_unique_ids"):
            with pytest.raises(RecordError, match="rejected by the database"):
                stored.import_data({"alarms": records})

        assert stored.export_data()["alarms"] == before["alarms"], "Rollback restores the stored alarms"


class TestBackupFiles:
    def test_write_and_load(self, stored, tmp_path):
        path = export_to_file(tmp_path / "backups" / "shiftcal.json", stored.export_data())

        loaded = load_from_file(path)

        assert len(loaded["patterns"]) == 2
        assert loaded["active_pattern_id"] == "reference"
        assert not path.with_name(path.name + ".tmp").exists()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError):
            load_from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(StorageError):
            load_from_file(tmp_path / "missing.json")

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")

        with pytest.raises(StorageError):
            load_from_file(path)

    def test_validate_fills_missing_lists(self):
        data = validate_export_data({"patterns": []})

        assert data["alarms"] == []
        assert data["basic_alarms"] == []
        assert data["active_pattern_id"] is None

    @pytest.mark.parametrize(
        "data",
        [
            {"patterns": {}},
            {"alarms": "none"},
            {"active_pattern_id": 5},
        ],
    )
    def test_validate_rejects(self, data):
        with pytest.raises(StorageError):
            validate_export_data(data)
