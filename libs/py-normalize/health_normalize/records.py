"""
Typed health-store records.

These are the shapes a HealthDataSource hands to the sync: one dataclass per
record kind, instants as timezone-aware datetimes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RecordKind(str, Enum):
    """Kinds of health-store records read by a sync."""
    SLEEP = "sleep"
    STEPS = "steps"
    WEIGHT = "weight"
    BODY_FAT = "bodyFat"


@dataclass
class SleepStage:
    """One stage segment inside a sleep session."""

    stage: int | str
    start_time: datetime
    end_time: datetime


@dataclass
class SleepSession:
    """A sleep session with its stage breakdown."""

    start_time: datetime
    end_time: datetime
    stages: list[SleepStage] = field(default_factory=list)


@dataclass
class StepsRecord:
    """Step count over an interval."""

    start_time: datetime
    end_time: datetime
    count: int


@dataclass
class WeightRecord:
    """A single weight reading."""

    time: datetime
    weight_kg: float


@dataclass
class BodyFatRecord:
    """A single body-fat percentage reading."""

    time: datetime
    percentage: float


HealthRecord = SleepSession | StepsRecord | WeightRecord | BodyFatRecord
