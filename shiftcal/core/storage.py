# shiftcal/core/storage.py
"""
JSON backup files for exported data.
"""

import json
import logging
from pathlib import Path
from typing import Any

from shiftcal.core.types import ExportData

logger = logging.getLogger(__name__)

EXPORT_LIST_KEYS = ("patterns", "alarms", "basic_alarms")


class StorageError(Exception):
    """General error type for problems reading or writing backup files."""

    pass


def _load_json(file_path: Path) -> Any:
    """
    Read and parse JSON with robust error handling.
    Args:
        file_path: Path to the JSON file
    Returns:
        Parsed JSON data
    Raises:
        StorageError: If file cannot be read or JSON is invalid
    """
    try:
        raw = file_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.exception("Failed to read JSON file %s", file_path)
        raise StorageError(f"Could not read JSON file {file_path}: {e}") from e

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.exception("Invalid JSON in file %s", file_path)
        raise StorageError(f"Invalid JSON in file {file_path}: {e}") from e


def validate_export_data(data: Any) -> ExportData:
    """
    Check the top-level shape of export data.

    Missing entity lists are treated as empty. Individual records are
    validated later, when they are decoded.

    Raises:
        StorageError: If the data is not an object or a list key holds something else
    """
    if not isinstance(data, dict):
        raise StorageError(f"Expected export object, got {type(data).__name__}")

    for key in EXPORT_LIST_KEYS:
        value = data.get(key, [])
        if not isinstance(value, list):
            raise StorageError(f"Expected list for '{key}', got {type(value).__name__}")

    active = data.get("active_pattern_id")
    if active is not None and not isinstance(active, str):
        raise StorageError("active_pattern_id must be a string or null")

    return {
        "patterns": data.get("patterns", []),
        "alarms": data.get("alarms", []),
        "basic_alarms": data.get("basic_alarms", []),
        "active_pattern_id": active,
        "export_timestamp": data.get("export_timestamp"),
    }


def load_from_file(file_path: Path | str) -> ExportData:
    """
    Load an exported data file.
    Returns:
        The export data
    Raises:
        StorageError: If file cannot be loaded or has the wrong shape
    """
    path = Path(file_path)
    data = validate_export_data(_load_json(path))
    logger.info(
        "Loaded backup %s: %d patterns, %d alarms, %d basic alarms",
        path,
        len(data["patterns"]),
        len(data["alarms"]),
        len(data["basic_alarms"]),
    )
    return data


def export_to_file(file_path: Path | str, data: ExportData) -> Path:
    """
    Write export data as pretty-printed JSON.

    The file is written next to its target first and then moved into place,
    so a failed write never leaves a truncated backup.

    Returns:
        The written path
    Raises:
        StorageError: If the file cannot be written
    """
    path = Path(file_path)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(path)
    except OSError as e:
        logger.exception("Failed to write backup file %s", path)
        raise StorageError(f"Could not write backup file {path}: {e}") from e

    logger.info("Wrote backup %s", path)
    return path
