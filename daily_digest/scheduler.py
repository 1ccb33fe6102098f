"""Daily trigger for the digest pipeline.

The scheduler sleeps until the next configured wall-clock time in the
configured zone and starts one run. Failures are logged only; the
scheduled path has no other surface.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, time, timedelta
import logging
from zoneinfo import ZoneInfo

from .config import ScheduleConfig
from .core.errors import RunInProgressError
from .logging_utils import log_event
from .runner import Clock, DigestPipeline, Sleeper, _utcnow


def parse_time_of_day(value: str) -> time:
    """Parse "HH:MM" into a time."""
    try:
        hour_text, minute_text = value.strip().split(":")
        return time(hour=int(hour_text), minute=int(minute_text))
    except ValueError as exc:
        raise ValueError(f"Invalid schedule time {value!r}, expected HH:MM") from exc


def next_run_at(now: datetime, at: time, tz: ZoneInfo) -> datetime:
    """Return the first moment strictly after ``now`` when the local clock reads ``at``."""
    local_now = now.astimezone(tz)
    candidate = datetime.combine(local_now.date(), at, tzinfo=tz)
    if candidate <= local_now:
        candidate = datetime.combine(local_now.date() + timedelta(days=1), at, tzinfo=tz)
    return candidate


class DailyScheduler:
    """Background task firing ``pipeline.run_once`` once a day."""

    def __init__(
        self,
        pipeline: DigestPipeline,
        cfg: ScheduleConfig,
        logger: logging.Logger | None = None,
        sleep: Sleeper = asyncio.sleep,
        clock: Clock = _utcnow,
    ):
        self.pipeline = pipeline
        self.cfg = cfg
        self.at = parse_time_of_day(cfg.time)
        self.tz = ZoneInfo(cfg.timezone)
        self.logger = logger or pipeline.logger
        self._sleep = sleep
        self._clock = clock
        self._task: asyncio.Task | None = None

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop(), name="daily-digest-scheduler")
            log_event(
                self.logger,
                f"Scheduled to run daily at {self.cfg.time} {self.cfg.timezone}",
                event="scheduler_started",
            )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        fire_at: datetime | None = None
        while True:
            now = self._clock()
            # A sleep that wakes early must not schedule the same slot twice.
            reference = now if fire_at is None else max(now, fire_at)
            fire_at = next_run_at(reference, self.at, self.tz)
            await self._sleep(max(0.0, (fire_at - now).total_seconds()))
            await self.fire()

    async def fire(self) -> None:
        """Run the pipeline once, logging instead of raising."""
        log_event(self.logger, "Running scheduled digest", event="scheduled_run")
        try:
            await self.pipeline.run_once(trigger="schedule")
        except RunInProgressError:
            log_event(
                self.logger,
                "Scheduled run skipped: a run is already in progress",
                level=logging.WARNING,
                event="scheduled_run_skipped",
            )
        except Exception:  # noqa: BLE001
            self.logger.exception("Scheduled run failed", extra={"event": "scheduled_run_failed"})
