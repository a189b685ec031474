"""
Daily sync scheduling.

Runs a job once a day at a local wall-clock time. Upload failures are logged
and the next day's run goes ahead; any other error stops the loop.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, time, timedelta
from typing import Any

from .exceptions import SyncError

logger = logging.getLogger(__name__)

DEFAULT_RUN_AT = time(8, 0)


def seconds_until(at: time, now: datetime | None = None) -> float:
    """
    Seconds from `now` until the next occurrence of `at`.

    Today if `at` is still ahead, otherwise tomorrow. `now` defaults to the
    local time.
    """
    now = now or datetime.now()
    target = now.replace(hour=at.hour, minute=at.minute, second=at.second, microsecond=0)
    if now >= target:
        target += timedelta(days=1)
    return (target - now).total_seconds()


def parse_run_at(value: str) -> time:
    """Parse HH:MM (24h)."""
    try:
        hour, minute = (int(part) for part in value.split(":"))
        return time(hour, minute)
    except ValueError as e:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM") from e


async def run_daily(
    job: Callable[[], Awaitable[Any]],
    at: time = DEFAULT_RUN_AT,
    max_runs: int | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    clock: Callable[[], datetime] = datetime.now,
) -> int:
    """
    Run `job` every day at `at`.

    Args:
        job: Coroutine function to run
        at: Local wall-clock time of day
        max_runs: Stop after this many runs (None runs forever)
        sleep: Awaitable sleep, injectable for tests
        clock: Current local time, injectable for tests

    Returns:
        Number of runs completed
    """
    runs = 0
    while max_runs is None or runs < max_runs:
        delay = seconds_until(at, clock())
        logger.info("Next sync in %.0f seconds (at %s)", delay, at.strftime("%H:%M"))
        await sleep(delay)

        try:
            await job()
        except SyncError as e:
            logger.error("Scheduled sync failed (%s): %s", e.kind.value, e.message)
        runs += 1

    return runs
