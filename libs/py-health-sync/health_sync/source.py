"""Health-store data sources."""

import asyncio
import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from dateutil.parser import isoparse

from health_normalize import (
    BodyFatRecord,
    HealthRecord,
    RecordKind,
    SleepSession,
    SleepStage,
    StepsRecord,
    WeightRecord,
)

from .exceptions import HealthSourceError

logger = logging.getLogger(__name__)


@runtime_checkable
class HealthDataSource(Protocol):
    """Read-only access to the health store.

    The sync asks for one record kind at a time over a time window and gets
    typed records back (see health_normalize.records).
    """

    async def read_records(
        self,
        kind: RecordKind,
        start: datetime,
        end: datetime,
    ) -> list[HealthRecord]:
        """Records of `kind` whose instant falls within [start, end]."""
        ...


def _instant(value: Any) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"expected an ISO-8601 string, got {type(value).__name__}")
    parsed = isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_sleep(item: dict[str, Any]) -> SleepSession:
    return SleepSession(
        start_time=_instant(item["startTime"]),
        end_time=_instant(item["endTime"]),
        stages=[
            SleepStage(
                stage=stage["stage"],
                start_time=_instant(stage["startTime"]),
                end_time=_instant(stage["endTime"]),
            )
            for stage in item.get("stages") or []
        ],
    )


def _parse_steps(item: dict[str, Any]) -> StepsRecord:
    return StepsRecord(
        start_time=_instant(item["startTime"]),
        end_time=_instant(item.get("endTime", item["startTime"])),
        count=int(item["count"]),
    )


def _parse_weight(item: dict[str, Any]) -> WeightRecord:
    return WeightRecord(time=_instant(item["time"]), weight_kg=float(item["weightKg"]))


def _parse_body_fat(item: dict[str, Any]) -> BodyFatRecord:
    return BodyFatRecord(time=_instant(item["time"]), percentage=float(item["percentage"]))


PARSERS: dict[RecordKind, Callable[[dict[str, Any]], HealthRecord]] = {
    RecordKind.SLEEP: _parse_sleep,
    RecordKind.STEPS: _parse_steps,
    RecordKind.WEIGHT: _parse_weight,
    RecordKind.BODY_FAT: _parse_body_fat,
}


def record_instant(record: HealthRecord) -> datetime:
    """Start or measurement instant of a record."""
    if isinstance(record, (WeightRecord, BodyFatRecord)):
        return record.time
    return record.start_time


class JsonExportSource:
    """
    Health store backed by a JSON export file.

    Expected layout, keyed by RecordKind value:

        {
          "sleep":   [{"startTime": ..., "endTime": ..., "stages": [...]}],
          "steps":   [{"startTime": ..., "endTime": ..., "count": 1234}],
          "weight":  [{"time": ..., "weightKg": 70.5}],
          "bodyFat": [{"time": ..., "percentage": 18.2}]
        }

    The file is re-read on every call so a long-running daily sync picks up
    fresh exports.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, Any]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise HealthSourceError(f"Health export not found: {self.path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise HealthSourceError(f"Cannot read health export {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise HealthSourceError(f"Health export {self.path} must be a JSON object")
        return data

    async def read_records(
        self,
        kind: RecordKind,
        start: datetime,
        end: datetime,
    ) -> list[HealthRecord]:
        data = await asyncio.to_thread(self._load)
        items = data.get(kind.value) or []
        parser = PARSERS[kind]

        records = []
        for index, item in enumerate(items):
            try:
                record = parser(item)
            except (KeyError, TypeError, ValueError) as e:
                raise HealthSourceError(
                    f"Bad {kind.value} record #{index} in {self.path}: {e!r}"
                ) from e
            if start <= record_instant(record) <= end:
                records.append(record)

        logger.debug("Read %d %s records from %s", len(records), kind.value, self.path)
        return records
