"""
Schedule module - skiftförhandsvisning, notifieringsplanering och larmlogik.

Exporterar alla publika funktioner.
"""

from .basic import (
    arm_one_time_alarm,
    build_basic_notifications,
    cycle_alarm_id,
    generate_cycle_alarms,
    next_occurrence,
    next_valid_date_for_alarm_type,
    one_time_instant,
    repeat_days_display,
    should_alarm_trigger,
)
from .defaults import (
    DefaultAlarmReconciliation,
    create_default_alarms,
    create_sample_pattern,
    preset_patterns,
    reconcile_default_alarms,
)
from .notifications import (
    calculate_alarm_schedule,
    count_scheduled_notifications,
    find_alarm_conflicts,
    format_message,
    get_next_alarm_time,
    notification_id,
    validate_pattern_alarms,
)
from .resync import plan_resync
from .service import SchedulingService, build_day_preview, format_date_display

__all__ = [
    # service
    "SchedulingService",
    "build_day_preview",
    "format_date_display",
    # notifications
    "calculate_alarm_schedule",
    "count_scheduled_notifications",
    "find_alarm_conflicts",
    "format_message",
    "get_next_alarm_time",
    "notification_id",
    "validate_pattern_alarms",
    # resync
    "plan_resync",
    # basic
    "arm_one_time_alarm",
    "build_basic_notifications",
    "cycle_alarm_id",
    "generate_cycle_alarms",
    "next_occurrence",
    "next_valid_date_for_alarm_type",
    "one_time_instant",
    "repeat_days_display",
    "should_alarm_trigger",
    # defaults
    "DefaultAlarmReconciliation",
    "create_default_alarms",
    "create_sample_pattern",
    "preset_patterns",
    "reconcile_default_alarms",
]
