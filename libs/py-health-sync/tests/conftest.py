"""Shared fixtures for health sync tests."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from httpx import Response

from health_normalize import (
    BodyFatRecord,
    RecordKind,
    SleepSession,
    StepsRecord,
    WeightRecord,
)

NOW = datetime(2024, 1, 15, 8, 0, tzinfo=UTC)


class StaticHealthSource:
    """In-memory health store that records what was asked of it."""

    def __init__(self, records=None, error: Exception | None = None):
        self.records = records or {}
        self.error = error
        self.calls = []

    async def read_records(self, kind, start, end):
        self.calls.append((kind, start, end))
        if self.error is not None:
            raise self.error
        return list(self.records.get(kind, []))


def make_response(payload=None, status_code: int = 200):
    mock_response = MagicMock(spec=Response)
    mock_response.status_code = status_code
    mock_response.json.return_value = payload
    return mock_response


@pytest.fixture
def health_records():
    """Two nights of sleep, one weigh-in, a day of steps."""
    night1 = NOW - timedelta(days=2, hours=10)
    night2 = NOW - timedelta(days=1, hours=9)
    return {
        RecordKind.SLEEP: [
            SleepSession(start_time=night1, end_time=night1 + timedelta(minutes=420)),
            SleepSession(start_time=night2, end_time=night2 + timedelta(minutes=390)),
        ],
        RecordKind.WEIGHT: [WeightRecord(time=NOW - timedelta(hours=1), weight_kg=70.5)],
        RecordKind.STEPS: [
            StepsRecord(start_time=NOW - timedelta(hours=5), end_time=NOW - timedelta(hours=4), count=5000),
            StepsRecord(start_time=NOW - timedelta(hours=3), end_time=NOW - timedelta(hours=2), count=3342),
        ],
        RecordKind.BODY_FAT: [BodyFatRecord(time=NOW - timedelta(hours=1), percentage=19.0)],
    }


@pytest.fixture
def health_source(health_records):
    return StaticHealthSource(health_records)
