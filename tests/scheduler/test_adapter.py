from __future__ import annotations

import pytest
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from newsroom_sync.scheduler import SyncScheduler, build_trigger
from newsroom_sync.scheduler.apsched_adapter import JOB_ID


class StubScheduler:
    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.running = False

    def add_job(self, callback, trigger, id, replace_existing, max_instances, coalesce):  # noqa: A002
        self.calls.append({"event": "add", "id": id, "trigger": trigger, "callback": callback})

    def start(self):
        self.running = True
        self.calls.append({"event": "started"})

    def shutdown(self, wait=False):  # noqa: ARG002
        self.running = False
        self.calls.append({"event": "shutdown"})

    def get_jobs(self):
        return []


def test_build_triggers() -> None:
    interval = build_trigger(interval=90)
    assert isinstance(interval, IntervalTrigger)
    assert interval.interval.total_seconds() == 90

    assert isinstance(build_trigger(cron="*/30 * * * *"), CronTrigger)


@pytest.mark.parametrize(
    "kwargs",
    [{}, {"interval": 60, "cron": "* * * * *"}, {"interval": 0}, {"cron": "not a cron"}],
)
def test_build_trigger_rejects_bad_input(kwargs) -> None:
    with pytest.raises(ValueError):
        build_trigger(**kwargs)


def test_schedule_registers_single_job_and_runs_now() -> None:
    stub = StubScheduler()
    scheduler = SyncScheduler(scheduler=stub)
    runs: list[int] = []

    scheduler.schedule(lambda: runs.append(1), interval=300, run_now=True)
    scheduler.start()
    scheduler.shutdown()

    assert stub.calls[0]["id"] == JOB_ID
    assert isinstance(stub.calls[0]["trigger"], IntervalTrigger)
    assert runs == [1]
    assert [call["event"] for call in stub.calls] == ["add", "started", "shutdown"]


def test_schedule_without_run_now_defers_job() -> None:
    stub = StubScheduler()
    runs: list[int] = []

    SyncScheduler(scheduler=stub).schedule(lambda: runs.append(1), cron="0 * * * *")

    assert runs == []
    assert scheduler_jobs(stub) == [JOB_ID]


def scheduler_jobs(stub: StubScheduler) -> list[str]:
    return [call["id"] for call in stub.calls if call["event"] == "add"]
