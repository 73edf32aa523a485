"""Scheduler adapters."""

from .apsched_adapter import SyncScheduler, build_trigger

__all__ = ["SyncScheduler", "build_trigger"]
