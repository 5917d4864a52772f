"""Services module - background maintenance jobs"""

from .scheduler import SweepScheduler, sweep_scheduler, SWEEP_JOB_ID

__all__ = ["SweepScheduler", "sweep_scheduler", "SWEEP_JOB_ID"]
