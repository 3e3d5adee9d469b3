"""Sweep Scheduler - Imperative Shell.

Runs the sweep on a fixed interval in a background thread. The on-demand
HTTP trigger calls the same orchestrator; overlapping runs are rejected by
the orchestrator itself.
"""

import logging
from collections.abc import Callable
from typing import Any

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger


logger = logging.getLogger(__name__)


SWEEP_JOB_ID = "environment_sweep"


class SweepScheduler:
    """Background scheduler for periodic sweeps."""

    def __init__(
        self,
        sweep: Callable[[], Any],
        interval_seconds: int = 300,
        scheduler: BackgroundScheduler | None = None,
    ) -> None:
        """Initialize scheduler.

        Args:
            sweep: Callable that runs one sweep
            interval_seconds: Seconds between sweeps
            scheduler: APScheduler instance (created if not provided)
        """
        self.sweep = sweep
        self.interval_seconds = interval_seconds
        self.scheduler = scheduler or BackgroundScheduler()

    def _run(self) -> None:
        try:
            self.sweep()
        except Exception:
            logger.exception("Scheduled sweep failed")

    def start(self) -> None:
        """Register the sweep job and start the scheduler."""
        self.scheduler.add_job(
            self._run,
            IntervalTrigger(seconds=self.interval_seconds),
            id=SWEEP_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info("Sweep scheduler started (every %ds)", self.interval_seconds)

    def stop(self) -> None:
        """Stop the scheduler, waiting for a running sweep to finish."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            logger.info("Sweep scheduler stopped")
