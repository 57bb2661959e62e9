# jobs/overdue_notifications_job.py

from core.logging_config import logger
from core.supabase_client import get_supabase_client
from services.overdue_notifications import run_overdue_check


def run() -> int:
    """
    CLI entry point for the overdue maintenance check.
    Meant for an external cron when the in-process scheduler is off:
        python -m jobs.overdue_notifications_job
    """
    client = get_supabase_client()
    if not client:
        raise RuntimeError("Supabase not configured")

    created = run_overdue_check(client)
    logger.info(f"Overdue notifications job created {created} notifications")
    return created


if __name__ == "__main__":
    run()
