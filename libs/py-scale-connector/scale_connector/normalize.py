"""Flatten vendor measurements into sync-ready records."""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from .vendor_types import Measurement

logger = logging.getLogger(__name__)

# Normalized key -> Measurement attribute
FIELD_MAP = {
    "weight": "weight",
    "bmi": "bmi",
    "bodyFat": "bodyfat",
    "muscle": "muscle",
    "water": "water",
    "bone": "bone",
    "visceralFat": "visfat",
    "bmr": "bmr",
    "protein": "protein",
    "bodyAge": "bodyage",
}


def epoch_to_date(timestamp: int | None) -> str | None:
    """UTC calendar date (YYYY-MM-DD) of an epoch-seconds timestamp."""
    if timestamp is None:
        return None
    try:
        return datetime.fromtimestamp(timestamp, UTC).isoformat()[:10]
    except (OverflowError, OSError, ValueError) as e:
        logger.warning("Unrepresentable measurement timestamp %s: %s", timestamp, e)
        return None


def normalize_measurement(measurement: Measurement) -> dict[str, Any]:
    """Map one measurement field-for-field; missing metrics stay None."""
    record: dict[str, Any] = {
        "timestamp": measurement.time_stamp,
        "date": epoch_to_date(measurement.time_stamp),
    }
    for key, attr in FIELD_MAP.items():
        record[key] = getattr(measurement, attr)
    return record


def normalize_measurements(measurements: Iterable[Measurement]) -> list[dict[str, Any]]:
    """Normalize a batch, preserving vendor order and length."""
    return [normalize_measurement(m) for m in measurements]
