"""
Health Normalize Library

Converts typed health-store records into upload payload entries and
defines the payload schema.
"""

from .normalizer import DataNormalizer, instant_date, isoformat_instant
from .records import (
    BodyFatRecord,
    HealthRecord,
    RecordKind,
    SleepSession,
    SleepStage,
    StepsRecord,
    WeightRecord,
)
from .schema import (
    DEFAULT_SOURCE,
    BodyFatEntry,
    SleepEntry,
    SleepStageEntry,
    SyncPayload,
    WeightEntry,
)

__version__ = "0.1.0"

__all__ = [
    "DataNormalizer",
    "isoformat_instant",
    "instant_date",
    "RecordKind",
    "HealthRecord",
    "SleepSession",
    "SleepStage",
    "StepsRecord",
    "WeightRecord",
    "BodyFatRecord",
    "DEFAULT_SOURCE",
    "SyncPayload",
    "SleepEntry",
    "SleepStageEntry",
    "WeightEntry",
    "BodyFatEntry",
]
