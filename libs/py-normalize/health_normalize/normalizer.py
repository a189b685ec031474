"""
Health-store record normalization.

Turns typed health-store records into payload entries and assembles the
upload payload.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from .records import BodyFatRecord, SleepSession, StepsRecord, WeightRecord
from .schema import (
    DEFAULT_SOURCE,
    BodyFatEntry,
    SleepEntry,
    SleepStageEntry,
    SyncPayload,
    WeightEntry,
)


def isoformat_instant(value: datetime) -> str:
    """
    Render an instant as ISO-8601 UTC with a Z suffix.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def instant_date(value: datetime) -> str:
    """UTC calendar date of an instant: the first 10 characters of its ISO form."""
    return isoformat_instant(value)[:10]


class DataNormalizer:
    """Normalizes health-store records into payload entries."""

    @staticmethod
    def normalize_sleep(session: SleepSession) -> SleepEntry:
        """Sleep session with whole-minute duration (truncated)."""
        seconds = (session.end_time - session.start_time).total_seconds()
        return SleepEntry(
            date=instant_date(session.start_time),
            start_time=isoformat_instant(session.start_time),
            end_time=isoformat_instant(session.end_time),
            duration_minutes=int(seconds / 60),
            stages=[
                SleepStageEntry(
                    stage=stage.stage,
                    start_time=isoformat_instant(stage.start_time),
                    end_time=isoformat_instant(stage.end_time),
                )
                for stage in session.stages
            ],
        )

    @staticmethod
    def normalize_weight(record: WeightRecord) -> WeightEntry:
        return WeightEntry(
            date=instant_date(record.time),
            time=isoformat_instant(record.time),
            weight_kg=record.weight_kg,
        )

    @staticmethod
    def normalize_body_fat(record: BodyFatRecord) -> BodyFatEntry:
        return BodyFatEntry(date=instant_date(record.time), percentage=record.percentage)

    @staticmethod
    def total_steps(records: Iterable[StepsRecord]) -> int:
        """Sum of step counts; 0 for an empty window."""
        return sum(record.count for record in records)

    @staticmethod
    def build_payload(
        sleep: Iterable[SleepSession],
        weight: Iterable[WeightRecord],
        steps: Iterable[StepsRecord],
        body_fat: Iterable[BodyFatRecord],
        vendor: list[dict[str, Any]] | None = None,
        source: str = DEFAULT_SOURCE,
        generated_at: datetime | None = None,
    ) -> SyncPayload:
        """
        Assemble the upload payload.

        Record order is kept as the health store returned it.
        """
        generated_at = generated_at or datetime.now(UTC)
        return SyncPayload(
            timestamp=isoformat_instant(generated_at),
            source=source,
            sleep=[DataNormalizer.normalize_sleep(s) for s in sleep],
            weight=[DataNormalizer.normalize_weight(w) for w in weight],
            steps=DataNormalizer.total_steps(steps),
            body_fat=[DataNormalizer.normalize_body_fat(b) for b in body_fat],
            vendor=list(vendor or []),
        )
