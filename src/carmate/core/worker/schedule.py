"""Daily trigger definition for recurring worker jobs."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from arq.cron import CronJob, cron


@dataclass(frozen=True)
class DailySchedule:
    """
    A job that runs once a day at a fixed local time.

    Owns the time of day and the timezone, and turns a worker coroutine into
    an ARQ cron job. The coroutine itself stays a plain function that can be
    called directly.
    """

    hour: int
    minute: int = 0
    timezone: str = "UTC"

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be between 0 and 23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be between 0 and 59, got {self.minute}")

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def cron_job(self, coroutine: Any, name: str | None = None) -> CronJob:
        """Register ``coroutine`` to run at this schedule's time (in the worker's timezone)."""
        return cron(
            coroutine,
            name=name,
            hour=self.hour,
            minute=self.minute,
            second=0,
            run_at_startup=False,
            unique=True,
        )

    def next_run(self, now: datetime | None = None) -> datetime:
        """Next trigger time strictly after ``now``, in this schedule's timezone."""
        now = (now or datetime.now(self.tzinfo)).astimezone(self.tzinfo)
        candidate = now.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        if candidate <= now:
            candidate += timedelta(days=1)
        return candidate
