import asyncio
import sys
from typing import cast

from arq.cli import watch_reload
from arq.connections import RedisSettings
from arq.typing import WorkerSettingsType
from arq.worker import check_health, run_worker

from ...core.config import settings
from ...core.logger import logging  # noqa: F401
from .functions import on_job_end, on_job_start, process_reminders_job, shutdown, startup
from .schedule import DailySchedule

REMINDER_SCHEDULE = DailySchedule(
    hour=settings.REMINDER_CRON_HOUR,
    minute=settings.REMINDER_CRON_MINUTE,
    timezone=settings.REMINDER_TIMEZONE,
)


class WorkerSettings:
    functions = [process_reminders_job]
    cron_jobs = [REMINDER_SCHEDULE.cron_job(process_reminders_job, name="daily_reminders")]
    # cron hour/minute are read in this timezone
    timezone = REMINDER_SCHEDULE.tzinfo
    # reminder batches must not overlap
    max_jobs = 1
    redis_settings = RedisSettings(host=settings.REDIS_QUEUE_HOST, port=settings.REDIS_QUEUE_PORT)
    on_startup = startup
    on_shutdown = shutdown
    on_job_start = on_job_start
    on_job_end = on_job_end
    handle_signals = False


def start_reminder_worker(check: bool = False, burst: bool | None = None, watch: str | None = None) -> None:
    """Run the reminder worker, or only report its health when ``check`` is set."""
    worker_settings = cast("WorkerSettingsType", WorkerSettings)

    if check:
        sys.exit(check_health(worker_settings))
    if watch:
        asyncio.run(watch_reload(watch, worker_settings))
        return
    run_worker(worker_settings, **({} if burst is None else {"burst": burst}))


if __name__ == "__main__":
    # python -m carmate.core.worker.settings
    start_reminder_worker()
