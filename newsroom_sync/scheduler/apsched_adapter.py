"""APScheduler wrapper running periodic sync passes."""

from __future__ import annotations

from typing import Any, Callable

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..logging_conf import configure_logging

JOB_ID = "newsroom-sync"


def build_trigger(interval: float | None = None, cron: str | None = None):
    """Return an interval or cron trigger; exactly one of them must be given."""

    if (interval is None) == (cron is None):
        raise ValueError("Provide either an interval or a cron expression")
    if cron is not None:
        return CronTrigger.from_crontab(cron)
    if interval <= 0:
        raise ValueError("Interval must be > 0 seconds")
    return IntervalTrigger(seconds=float(interval))


class SyncScheduler:
    """Run ``job`` on a trigger until interrupted."""

    def __init__(self, scheduler: Any | None = None) -> None:
        self.scheduler = scheduler or BlockingScheduler()
        self.logger = configure_logging().bind(component="scheduler")

    def schedule(
        self,
        job: Callable[[], Any],
        interval: float | None = None,
        cron: str | None = None,
        run_now: bool = False,
    ) -> None:
        trigger = build_trigger(interval=interval, cron=cron)
        self.scheduler.add_job(
            job,
            trigger=trigger,
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.logger.info("job_scheduled", trigger=str(trigger), run_now=run_now)
        if run_now:
            job()

    def start(self) -> None:
        self.logger.info("apscheduler_started")
        try:
            self.scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            self.shutdown()

    def shutdown(self) -> None:
        if getattr(self.scheduler, "running", False):
            self.scheduler.shutdown(wait=False)
        self.logger.info("apscheduler_stopped")


__all__ = ["JOB_ID", "SyncScheduler", "build_trigger"]
