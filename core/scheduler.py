# core/scheduler.py
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from core.logging_config import get_logger
from core.supabase_client import get_supabase_client
from services.overdue_notifications import run_overdue_check

logger = get_logger("scheduler")

_scheduler: Optional[BackgroundScheduler] = None


def run_scheduled_overdue_check():
    """Daily overdue-maintenance warnings. Failures are logged, never raised into the scheduler."""
    client = get_supabase_client()
    if client is None:
        logger.warning("Supabase not configured - skipping overdue check")
        return

    try:
        created = run_overdue_check(client)
        logger.info(f"Overdue check finished: {created} notifications")
    except Exception:
        logger.exception("Overdue check failed")


def start_scheduler() -> BackgroundScheduler:
    """
    Initialize the APScheduler background process.
    Runs the overdue check daily at 09:00 UTC.
    """
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        return _scheduler

    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        run_scheduled_overdue_check,
        trigger=CronTrigger(hour=9, minute=0),
        id="overdue_notifications_job",
        replace_existing=True,
    )
    scheduler.start()
    _scheduler = scheduler

    logger.info("⏰ Scheduler started. Overdue check set for 09:00 UTC.")
    return scheduler


def shutdown_scheduler():
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
    _scheduler = None
