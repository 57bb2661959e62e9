# services/overdue_notifications.py

"""
Warn users about maintenance requests left open for too long.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from supabase import Client

from core.config import settings
from core.logging_config import get_logger
from core.utils import parse_timestamp, utcnow
from models.enums import NotificationType

logger = get_logger("overdue")

OVERDUE_TITLE = "Manutenção em Atraso"
RELATED_TYPE = "maintenance_request"


def overdue_message(title: str, days: int) -> str:
    return f'A manutenção "{title}" está aberta há mais de {days} dias.'


def select_overdue(
    requests: Iterable[Dict[str, Any]],
    recently_warned_ids: Iterable[str],
    now: datetime,
    days: int,
) -> List[Dict[str, Any]]:
    """
    Open requests opened more than `days` ago that were not warned
    about recently.
    """
    cutoff = now - timedelta(days=days)
    warned = set(recently_warned_ids)

    overdue = []
    for row in requests:
        if row.get("status") != "open" or row.get("id") in warned:
            continue
        opened = parse_timestamp(row.get("opening_date"))
        if opened is not None and opened < cutoff:
            overdue.append(row)
    return overdue


def build_notification(row: Dict[str, Any], days: int) -> Dict[str, Any]:
    return {
        "user_id": row["user_id"],
        "title": OVERDUE_TITLE,
        "message": overdue_message(row.get("title") or "", days),
        "type": NotificationType.warning.value,
        "related_id": row["id"],
        "related_type": RELATED_TYPE,
        "read": False,
    }


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def run_overdue_check(client: Client, now: Optional[datetime] = None, days: Optional[int] = None) -> int:
    """
    Insert one warning per overdue request, at most one per request per
    UTC calendar day.
    Returns how many notifications were created.
    """
    now = now or utcnow()
    days = days or settings.OVERDUE_AFTER_DAYS
    cutoff = now - timedelta(days=days)

    requests = (
        client.table("maintenance_requests")
        .select("id, user_id, title, status, opening_date")
        .eq("status", "open")
        .lt("opening_date", cutoff.isoformat())
        .execute()
    ).data or []

    if not requests:
        logger.info("No overdue maintenance requests")
        return 0

    warned = (
        client.table("notifications")
        .select("related_id")
        .eq("type", NotificationType.warning.value)
        .eq("related_type", RELATED_TYPE)
        .gte("created_at", start_of_day(now).isoformat())
        .execute()
    ).data or []

    overdue = select_overdue(requests, [w.get("related_id") for w in warned], now, days)
    if not overdue:
        logger.info("Overdue requests were already notified today")
        return 0

    client.table("notifications").insert([build_notification(r, days) for r in overdue]).execute()
    logger.info(f"Created {len(overdue)} overdue notifications")
    return len(overdue)
