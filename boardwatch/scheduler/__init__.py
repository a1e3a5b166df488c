"""Scheduler module for periodic sweeps."""

from .scheduler import SweepScheduler
from .jobs import JobRegistry, create_default_jobs

__all__ = ["SweepScheduler", "JobRegistry", "create_default_jobs"]
