"""Recurring job scheduler."""

from slashbridge.modules.scheduler.service import SchedulerService

__all__ = ["SchedulerService"]
