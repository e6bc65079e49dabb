# shiftcal/routes/data.py
"""
API endpoints for data export, import and housekeeping.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from shiftcal.core.config import BACKUP_DIR, BACKUP_FILENAME
from shiftcal.core.storage import StorageError, export_to_file, load_from_file, validate_export_data
from shiftcal.database.repository import ShiftRepository

from .shared import get_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/data", tags=["data"])


@router.get("/export")
async def export_data(repo: ShiftRepository = Depends(get_repository)):
    """All patterns, alarms and the active pattern as flat records."""
    return repo.export_data()


@router.post("/import")
async def import_data(data: Any = Body(...), repo: ShiftRepository = Depends(get_repository)):
    """
    Replace stored data with an export.

    Broken records are rejected with 400 and nothing is written.
    """
    try:
        export = validate_export_data(data)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    present = {key: value for key, value in export.items() if key in data}
    return repo.import_data(present)


@router.post("/backup")
async def backup_data(repo: ShiftRepository = Depends(get_repository)):
    """Write the current export to the backup file, replacing any earlier backup."""
    try:
        path = export_to_file(BACKUP_DIR / BACKUP_FILENAME, repo.export_data())
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)) from e
    return {"path": str(path), "stats": repo.get_storage_stats()}


@router.post("/restore")
async def restore_data(repo: ShiftRepository = Depends(get_repository)):
    """
    Replace stored data with the backup file.

    404 when no backup has been written, 400 when the file is unreadable or
    holds broken records. The store is unchanged on failure.
    """
    path = BACKUP_DIR / BACKUP_FILENAME
    if not path.exists():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No backup found")
    try:
        export = load_from_file(path)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    logger.info("Restoring data from %s", path)
    return repo.import_data(export)


@router.get("/stats")
async def get_stats(repo: ShiftRepository = Depends(get_repository)):
    return repo.get_storage_stats()


@router.post("/clear")
async def clear_data(repo: ShiftRepository = Depends(get_repository)):
    repo.clear_all_data()
    return {"cleared": True}
