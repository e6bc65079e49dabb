"""
Tests for startup data, logging and error tracking setup.
"""

import json
import logging
import os
import sys
from pathlib import Path
from unittest.mock import patch

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from shiftcal.core.logging_config import JSONFormatter, LogContext
from shiftcal.core.models import AlarmType
from shiftcal.core.schedule import create_default_alarms
from shiftcal.core.sentry_config import before_send_hook, init_sentry
from shiftcal.main import prepare_initial_data


class TestInitialData:
    @patch("shiftcal.main.SEED_SAMPLE_PATTERN", True)
    def test_seeds_sample_pattern(self, repo):
        prepare_initial_data(repo)

        patterns = repo.list_patterns()
        assert len(patterns) == 1
        assert patterns[0].name == "Day-Day-Night-Night-Off-Off"
        assert repo.get_active_pattern_id() == patterns[0].id
        assert len(repo.list_alarms(patterns[0].id)) == 3

    @patch("shiftcal.main.SEED_SAMPLE_PATTERN", False)
    def test_seeding_disabled(self, repo):
        prepare_initial_data(repo)
        assert repo.list_patterns() == []

    def test_reconciles_active_pattern(self, repo, reference_pattern):
        repo.save_pattern(reference_pattern)
        repo.set_active_pattern(reference_pattern.id)
        day_alarms = [a for a in create_default_alarms(reference_pattern.id) if a.alarm_type == AlarmType.DAY]
        duplicate = day_alarms[0].copy_with(id="duplicate-day")
        repo.save_alarm(day_alarms[0])
        repo.save_alarm(duplicate)

        prepare_initial_data(repo)

        alarms = repo.list_alarms(reference_pattern.id)
        assert sorted(a.alarm_type.value for a in alarms) == ["day", "night", "off"]


class TestLogging:
    def test_json_formatter_includes_context(self):
        logger = logging.getLogger("shiftcal.test")
        with LogContext(alarm_id="alarm-1"):
            record = logger.makeRecord(logger.name, logging.INFO, __file__, 1, "Toggled %s", ("alarm-1",), None)

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Toggled alarm-1"
        assert data["level"] == "INFO"
        assert data["alarm_id"] == "alarm-1"

    def test_context_is_removed_on_exit(self):
        logger = logging.getLogger("shiftcal.test")
        with LogContext(pattern_id="p1"):
            pass
        record = logger.makeRecord(logger.name, logging.INFO, __file__, 1, "msg", (), None)
        assert not hasattr(record, "pattern_id")


class TestSentry:
    @patch.dict(os.environ, {"PRODUCTION": "false"})
    def test_disabled_in_development(self):
        assert init_sentry() is False

    @patch.dict(os.environ, {"PRODUCTION": "true", "SENTRY_DSN": ""})
    def test_disabled_without_dsn(self):
        assert init_sentry() is False

    def test_sensitive_request_data_filtered(self):
        event = {
            "request": {
                "headers": {"cookie": "session=1", "accept": "text/calendar"},
                "query_string": "token=abc",
            }
        }

        filtered = before_send_hook(event, None)

        assert filtered["request"]["headers"]["cookie"] == "[Filtered]"
        assert filtered["request"]["headers"]["accept"] == "text/calendar"
        assert filtered["request"]["query_string"] == "[Filtered]"
