# shiftcal/core/config.py

import os
from pathlib import Path
from typing import Final


# ==========================
# Sökhorisonter (dagar)
# ==========================

#: Hur långt framåt get_next_shift_date letar innan den ger upp.
#: Värdet 60 räcker för alla förinställda mönster; mönster med längre cykler
#: kan skicka in en egen horisont.
NEXT_SHIFT_SEARCH_DAYS: Final[int] = 60

#: Rullande horisont för schemalagda notifieringar.
#: Larm inom de närmaste 30 dagarna hålls schemalagda och förlängs vid resync.
SCHEDULING_HORIZON_DAYS: Final[int] = 30

#: Max antal notifieringar per larm inom horisonten.
#: Värdet 64 motsvarar plattformsgränsen för väntande lokala notifieringar.
MAX_NOTIFICATIONS_PER_ALARM: Final[int] = 64

#: Standardlängd på förhandsvisningen av kommande skift.
PREVIEW_DAYS: Final[int] = 7

#: Hur långt framåt villkorskontrollen letar efter nästa giltiga larmdag.
VALID_DATE_SEARCH_DAYS: Final[int] = 30


# ==========================
# Datumkodning
# ==========================

#: Millisekunder per dygn, används av epoch-kodningen av datum.
MS_PER_DAY: Final[int] = 86_400_000


# ==========================
# Notifierings-id
# ==========================

#: Övre gräns (exklusiv) för notifierings-id, ryms i en 32-bitars int.
NOTIFICATION_ID_MODULUS: Final[int] = 2_147_483_647


# ==========================
# Miljö
# ==========================

#: Databas-URL. SQLite-fil i arbetskatalogen om inget annat anges.
DATABASE_URL: Final[str] = os.getenv("SHIFTCAL_DATABASE_URL", "sqlite:///./shiftcal.db")

#: Katalog för JSON-backuper som skrivs och läses av /api/data/backup och /restore.
BACKUP_DIR: Final[Path] = Path(os.getenv("SHIFTCAL_BACKUP_DIR", "./backups"))

#: Filnamn för backupen i BACKUP_DIR.
BACKUP_FILENAME: Final[str] = "shiftcal-backup.json"

#: Skapa ett exempelmönster vid första start när databasen är tom.
SEED_SAMPLE_PATTERN: Final[bool] = os.getenv("SHIFTCAL_SEED_SAMPLE", "true").lower() == "true"

#: Versionssträng som rapporteras av /health och Sentry.
APP_VERSION: Final[str] = "0.1.0"
