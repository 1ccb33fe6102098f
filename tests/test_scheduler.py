"""Tests for the daily trigger."""

from __future__ import annotations

import asyncio
from datetime import datetime, time, timezone
import logging
from zoneinfo import ZoneInfo

import pytest

from daily_digest.config import ScheduleConfig
from daily_digest.core.errors import PublishError, RunInProgressError
from daily_digest.scheduler import DailyScheduler, next_run_at, parse_time_of_day


SEOUL = ZoneInfo("Asia/Seoul")


def test_parse_time_of_day():
    assert parse_time_of_day("07:00") == time(7, 0)
    assert parse_time_of_day(" 23:45 ") == time(23, 45)
    with pytest.raises(ValueError, match="HH:MM"):
        parse_time_of_day("7am")


def test_next_run_later_today():
    now = datetime(2026, 10, 17, 20, 0, tzinfo=timezone.utc)  # 05:00 in Seoul on the 18th

    assert next_run_at(now, time(7, 0), SEOUL) == datetime(2026, 10, 18, 7, 0, tzinfo=SEOUL)


def test_next_run_rolls_to_tomorrow_when_time_passed():
    now = datetime(2026, 10, 18, 7, 0, tzinfo=SEOUL)

    assert next_run_at(now, time(7, 0), SEOUL) == datetime(2026, 10, 19, 7, 0, tzinfo=SEOUL)


class _Pipeline:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.triggers: list[str] = []
        self.logger = logging.getLogger("test_scheduler")

    async def run_once(self, trigger: str = "manual"):
        self.triggers.append(trigger)
        if self.error is not None:
            raise self.error


@pytest.mark.parametrize(
    "error",
    [None, RunInProgressError("busy"), PublishError("rejected"), RuntimeError("bug")],
)
def test_fire_never_raises(error):
    pipeline = _Pipeline(error)
    scheduler = DailyScheduler(pipeline, ScheduleConfig())

    asyncio.run(scheduler.fire())

    assert pipeline.triggers == ["schedule"]


def test_start_and_stop_background_task():
    scheduler = DailyScheduler(_Pipeline(), ScheduleConfig())

    async def _go():
        scheduler.start()
        task = scheduler._task  # noqa: SLF001
        assert task is not None and not task.done()
        await scheduler.stop()
        return task

    task = asyncio.run(_go())

    assert task.cancelled()


class _StopLoop(Exception):
    pass


def test_early_wakeup_does_not_fire_same_slot_twice():
    times = iter(
        [
            datetime(2026, 10, 18, 6, 0, tzinfo=SEOUL),
            # woke 100 ms before the 07:00 slot; the run then failed fast
            datetime(2026, 10, 18, 6, 59, 59, 900000, tzinfo=SEOUL),
        ]
    )
    delays: list[float] = []

    async def sleep(seconds: float) -> None:
        delays.append(seconds)
        if len(delays) == 2:
            raise _StopLoop

    pipeline = _Pipeline(PublishError("rejected"))
    scheduler = DailyScheduler(pipeline, ScheduleConfig(), sleep=sleep, clock=lambda: next(times))

    with pytest.raises(_StopLoop):
        asyncio.run(scheduler._loop())  # noqa: SLF001

    assert pipeline.triggers == ["schedule"]
    assert delays[0] == 3600
    assert delays[1] == pytest.approx(24 * 3600 + 0.1)
