"""Background scheduling of scan runs and the shared orchestrator instance."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import TYPE_CHECKING

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from firmwatch.core.config import get_settings
from firmwatch.core.database import SessionLocal
from firmwatch.services.reddit_client import RedditClient
from firmwatch.services.scan import ScanOrchestrator
from firmwatch.services.store import SqlStore

if TYPE_CHECKING:
    from firmwatch.core.config import Settings

logger = logging.getLogger(__name__)

SCAN_JOB_ID = "scheduled-scan"
STARTUP_SCAN_JOB_ID = "startup-scan"

_SCHEDULER: BackgroundScheduler | None = None


def build_orchestrator(settings: Settings) -> ScanOrchestrator:
    """Wire the orchestrator to the Reddit client and the SQL store."""
    return ScanOrchestrator(
        source=RedditClient(settings),
        store=SqlStore(SessionLocal),
        batch_size=settings.MAX_POSTS_PER_SCAN,
        window_days=settings.RISK_WINDOW_DAYS,
    )


@lru_cache
def get_orchestrator() -> ScanOrchestrator:
    """Process-wide orchestrator shared by the timer and the API trigger."""
    return build_orchestrator(get_settings())


def _scheduled_scan(orchestrator: ScanOrchestrator) -> None:
    outcome = orchestrator.run(trigger="scheduled")
    if not outcome.success:
        logger.warning(
            "Scheduled scan failed; next attempt at the next interval",
            extra={"reason": outcome.error_message},
        )


def start_scheduler(
    settings: Settings,
    orchestrator: ScanOrchestrator | None = None,
) -> BackgroundScheduler:
    """
    Start the background scheduler: one scan every SCAN_INTERVAL_HOURS plus one
    SCAN_STARTUP_DELAY_SEC after start. Idempotent; returns the running scheduler.
    """
    global _SCHEDULER
    if _SCHEDULER is not None and _SCHEDULER.running:
        return _SCHEDULER

    orchestrator = orchestrator or get_orchestrator()
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        _scheduled_scan,
        IntervalTrigger(hours=settings.SCAN_INTERVAL_HOURS),
        args=[orchestrator],
        id=SCAN_JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    run_at = datetime.now(timezone.utc) + timedelta(seconds=settings.SCAN_STARTUP_DELAY_SEC)
    scheduler.add_job(
        _scheduled_scan,
        DateTrigger(run_date=run_at),
        args=[orchestrator],
        id=STARTUP_SCAN_JOB_ID,
        replace_existing=True,
    )
    scheduler.start()
    _SCHEDULER = scheduler
    logger.info(
        "Scan scheduler started",
        extra={
            "interval_hours": settings.SCAN_INTERVAL_HOURS,
            "startup_delay_sec": settings.SCAN_STARTUP_DELAY_SEC,
        },
    )
    return scheduler


def stop_scheduler() -> None:
    """Stop the background scheduler if it is running."""
    global _SCHEDULER
    if _SCHEDULER is not None and _SCHEDULER.running:
        _SCHEDULER.shutdown(wait=False)
        logger.info("Scan scheduler stopped")
    _SCHEDULER = None


def is_scheduler_running() -> bool:
    """True when the background scheduler is started in this process."""
    return _SCHEDULER is not None and _SCHEDULER.running
