"""Shared utilities."""

from .scheduler import ManualScheduler, Scheduler, ThreadScheduler

__all__ = ["Scheduler", "ThreadScheduler", "ManualScheduler"]
