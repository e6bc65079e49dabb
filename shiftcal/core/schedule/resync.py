"""Synkronisering mellan sparade larm och schemalagda notifieringar."""

import datetime
import logging
from collections.abc import Iterable

from shiftcal.core.config import NOTIFICATION_ID_MODULUS, SCHEDULING_HORIZON_DAYS
from shiftcal.core.models import BasicAlarm, ResyncPlan, ScheduledNotification, ShiftAlarm, ShiftPattern

from .basic import build_basic_notifications
from .notifications import calculate_alarm_schedule

logger = logging.getLogger(__name__)


def _assign_unique_ids(candidates: Iterable[ScheduledNotification]) -> dict[int, ScheduledNotification]:
    """
    Indexerar notifieringar på id och flyttar kolliderande till nästa lediga id.

    Ordningen (tid, larm-id, id) avgör vem som behåller sitt id, så samma
    indata ger alltid samma tilldelning.
    """
    ordered = sorted(candidates, key=lambda n: (n.scheduled_time, n.alarm_id, n.id))

    desired: dict[int, ScheduledNotification] = {}
    collided: list[ScheduledNotification] = []
    for notification in ordered:
        if notification.id in desired:
            collided.append(notification)
        else:
            desired[notification.id] = notification

    for notification in collided:
        new_id = notification.id
        while new_id in desired:
            new_id = (new_id + 1) % NOTIFICATION_ID_MODULUS
        logger.warning(
            "Notification id %d for alarm %s at %s is taken by alarm %s, using %d",
            notification.id,
            notification.alarm_id,
            notification.scheduled_time,
            desired[notification.id].alarm_id,
            new_id,
        )
        desired[new_id] = notification.copy_with(id=new_id)

    return desired


def plan_resync(
    shift_alarms: Iterable[ShiftAlarm],
    patterns: Iterable[ShiftPattern],
    scheduled_ids: Iterable[int],
    now: datetime.datetime,
    basic_alarms: Iterable[BasicAlarm] = (),
    horizon_days: int = SCHEDULING_HORIZON_DAYS,
) -> ResyncPlan:
    """
    Räknar ut vad som ska schemaläggas och avbokas.

    Ett larm är Inactive, Active-Pending eller Fired. Planen innehåller alla
    notifieringar som ska finnas just nu (aktiva larm i aktiva mönster, inom
    horisonten och efter now). Id:n som redan är schemalagda men inte finns i
    den mängden ska avbokas: inaktiva larm, passerade tillfällen och sådant som
    fallit ur fönstret. Två notifieringar med samma id behålls båda, den senare
    får nästa lediga id. Funktionen är ren, samma indata ger samma plan.

    Args:
        shift_alarms: Alla skiftlarm
        patterns: Alla mönster
        scheduled_ids: Notifierings-id som är schemalagda på plattformen nu
        now: Aktuell lokal tid
        basic_alarms: Basic-larm som också ska synkas
        horizon_days: Rullande horisont för skiftlarm

    Returns:
        ResyncPlan med to_schedule, to_cancel och orphaned_alarm_ids
    """
    patterns_by_id = {pattern.id: pattern for pattern in patterns}

    candidates: list[ScheduledNotification] = []
    orphaned = set()

    for alarm in shift_alarms:
        pattern = patterns_by_id.get(alarm.pattern_id)
        if pattern is None:
            orphaned.add(alarm.id)
            continue
        if not pattern.is_active:
            continue
        candidates.extend(calculate_alarm_schedule(alarm, pattern, now, horizon_days=horizon_days))

    for basic_alarm in basic_alarms:
        candidates.extend(build_basic_notifications(basic_alarm, now))

    desired = _assign_unique_ids(candidates)

    to_schedule = tuple(sorted(desired.values(), key=lambda n: (n.scheduled_time, n.id)))
    to_cancel = frozenset(scheduled_ids).difference(desired)

    if orphaned:
        logger.warning("Found %d alarms without a pattern: %s", len(orphaned), sorted(orphaned))
    logger.info("Resync plan: %d to schedule, %d to cancel", len(to_schedule), len(to_cancel))

    return ResyncPlan(
        to_schedule=to_schedule,
        to_cancel=to_cancel,
        orphaned_alarm_ids=frozenset(orphaned),
    )
