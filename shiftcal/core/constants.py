# shiftcal/core/constants.py
from typing import Final

# ==========================
# Veckostruktur / datum
# ==========================

#: Antal dagar per vecka.
DAYS_PER_WEEK: Final[int] = 7

#: Korta veckodagsnamn, indexerade som datetime.weekday() (0=måndag, 6=söndag).
#: Språkoberoende, används i förhandsvisningar och repeat-texter.
WEEKDAY_NAMES: Final[tuple[str, ...]] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

#: Veckodagsnummer för basic-larm (1=måndag ... 7=söndag), som i isoweekday().
ISO_WEEKDAYS: Final[tuple[int, ...]] = tuple(range(1, DAYS_PER_WEEK + 1))

#: Vardagar respektive helgdagar i isoweekday-numrering.
WORKDAY_NUMBERS: Final[frozenset[int]] = frozenset({1, 2, 3, 4, 5})
WEEKEND_NUMBERS: Final[frozenset[int]] = frozenset({6, 7})


# ==========================
# Meddelandemallar
# ==========================

#: Platshållare som ersätts med matchat skifts visningsnamn.
PLACEHOLDER_SHIFT: Final[str] = "{shift}"

#: Platshållare för skiftets kortkod (D/N/O).
PLACEHOLDER_SHIFT_CODE: Final[str] = "{shift_code}"

#: Platshållare för skiftets beskrivning.
PLACEHOLDER_SHIFT_DESC: Final[str] = "{shift_desc}"


# ==========================
# Larmstandarder
# ==========================

#: Standardvolym för larm (0.0-1.0).
DEFAULT_VOLUME: Final[float] = 0.8

#: Snooze-längd i minuter.
DEFAULT_SNOOZE_MINUTES: Final[int] = 10

#: Max antal snooze innan larmet ger upp.
DEFAULT_MAX_SNOOZE_COUNT: Final[int] = 3

#: Etikett för basic-larm som saknar etikett i sparad data.
DEFAULT_BASIC_LABEL: Final[str] = "Alarm"

#: Prefix för larm-id som genererats från en skiftcykel.
CYCLE_ALARM_PREFIX: Final[str] = "cycle_"


# ==========================
# Förinställda mönster
# ==========================

#: Namn och cykel (skiftkoder) för de förinställda mönstren.
#: Det första mönstret används även som exempelmönster vid första start.
PRESET_PATTERNS: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    ("Day-Day-Night-Night-Off-Off", ("day", "day", "night", "night", "off", "off")),
    ("Day-Night-Off", ("day", "night", "off")),
    ("Day-Day-Off", ("day", "day", "off")),
    ("Night-Night-Off-Off", ("night", "night", "off", "off")),
    ("Day-Off", ("day", "off")),
)

#: Standardlarm per larmtyp: (typ, timme, minut, titel, meddelande).
DEFAULT_ALARMS: Final[tuple[tuple[str, int, int, str, str], ...]] = (
    ("day", 6, 0, "Day Shift Alarm", "Time to get ready for your day shift!"),
    ("night", 18, 0, "Night Shift Alarm", "Time to get ready for your night shift!"),
    ("off", 9, 0, "Day Off Alarm", "Enjoy your day off!"),
)
