# services/dashboard.py

"""
Dashboard aggregation.

Pure functions over rows already fetched for one user, so the router
stays a thin fetch + build and the arithmetic can be tested directly.
"""

from collections import OrderedDict
from datetime import date
from typing import Any, Dict, List, Optional

from core.utils import parse_timestamp, to_money, utcnow

NO_CONDOMINIUM = "Sem condomínio"
TOP_SUPPLIERS_LIMIT = 5
RECENT_LIMIT = 8
TREND_MONTHS = 6

PT_BR_MONTHS = ["jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez"]


def _is_all(value: Optional[str]) -> bool:
    return value is None or value == "" or value == "all"


def _related_name(row: Dict[str, Any], key: str) -> Optional[str]:
    related = row.get(key)
    if isinstance(related, dict):
        return related.get("name")
    return None


def filter_requests(
    requests: List[Dict[str, Any]],
    condominium_id: Optional[str] = None,
    supplier_id: Optional[str] = None,
    service_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Apply the dashboard filters ("all" or None means no filter)."""
    result = []
    for row in requests:
        if not _is_all(condominium_id) and row.get("condominium_id") != condominium_id:
            continue
        if not _is_all(supplier_id) and row.get("supplier_id") != supplier_id:
            continue
        if not _is_all(service_type) and service_type not in (row.get("service_types") or []):
            continue
        result.append(row)
    return result


def last_months(today: date, count: int = TREND_MONTHS) -> List[tuple]:
    """(year, month) for the last `count` calendar months, oldest first."""
    months = []
    year, month = today.year, today.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(months))


def monthly_trend(requests: List[Dict[str, Any]], today: date) -> List[Dict[str, Any]]:
    buckets = OrderedDict()
    for year, month in last_months(today):
        buckets[(year, month)] = {
            "month": PT_BR_MONTHS[month - 1],
            "year_month": f"{year:04d}-{month:02d}",
            "count": 0,
            "spent": 0.0,
        }

    for row in requests:
        opened = parse_timestamp(row.get("opening_date"))
        if opened is None:
            continue
        bucket = buckets.get((opened.year, opened.month))
        if bucket is None:
            continue
        bucket["count"] += 1
        bucket["spent"] += row.get("final_value") or 0

    for bucket in buckets.values():
        bucket["spent"] = to_money(bucket["spent"])
    return list(buckets.values())


def top_suppliers(requests: List[Dict[str, Any]], limit: int = TOP_SUPPLIERS_LIMIT) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for row in requests:
        name = _related_name(row, "supplier")
        if name:
            counts[name] = counts.get(name, 0) + 1

    # sorted() is stable: ties keep first-seen order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [{"name": name, "count": count} for name, count in ranked[:limit]]


def condominium_stats(requests: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    stats: Dict[str, Dict[str, Any]] = {}

    for row in requests:
        name = _related_name(row, "condominium") or NO_CONDOMINIUM
        entry = stats.setdefault(name, {
            "name": name,
            "total_maintenance": 0,
            "open_maintenance": 0,
            "in_progress_maintenance": 0,
            "completed_maintenance": 0,
            "total_spent": 0.0,
            "service_types": {},
        })

        entry["total_maintenance"] += 1
        status = row.get("status")
        if status in ("open", "in_progress", "completed"):
            entry[f"{status}_maintenance"] += 1

        entry["total_spent"] += row.get("final_value") or 0

        for service_type in row.get("service_types") or []:
            entry["service_types"][service_type] = entry["service_types"].get(service_type, 0) + 1

    result = sorted(stats.values(), key=lambda e: e["total_maintenance"], reverse=True)
    for entry in result:
        entry["total_spent"] = to_money(entry["total_spent"])
    return result


def recent_maintenance(requests: List[Dict[str, Any]], limit: int = RECENT_LIMIT) -> List[Dict[str, Any]]:
    def opened_at(row):
        parsed = parse_timestamp(row.get("opening_date"))
        return parsed.timestamp() if parsed else float("-inf")

    return sorted(requests, key=opened_at, reverse=True)[:limit]


def build_dashboard(
    condominiums: List[Dict[str, Any]],
    suppliers: List[Dict[str, Any]],
    requests: List[Dict[str, Any]],
    condominium_id: Optional[str] = None,
    supplier_id: Optional[str] = None,
    service_type: Optional[str] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Dashboard payload for one user's data.

    Condominium and supplier totals ignore the filters; everything derived
    from maintenance requests uses the filtered set.
    """
    today = today or utcnow().date()
    filtered = filter_requests(requests, condominium_id, supplier_id, service_type)

    completed = [r for r in filtered if r.get("status") == "completed"]

    spent_by_type: Dict[str, float] = {}
    for row in completed:
        value = row.get("final_value")
        if not value:
            continue
        for stype in row.get("service_types") or []:
            spent_by_type[stype] = spent_by_type.get(stype, 0) + value

    return {
        "total_condominiums": len(condominiums),
        "total_suppliers": len(suppliers),
        "open_maintenance": sum(1 for r in filtered if r.get("status") == "open"),
        "in_progress_maintenance": sum(1 for r in filtered if r.get("status") == "in_progress"),
        "completed_maintenance": len(completed),
        "total_spent": to_money(sum((r.get("final_value") or 0) for r in completed)),
        "total_spent_by_service_type": {k: to_money(v) for k, v in spent_by_type.items()},
        "top_suppliers": top_suppliers(filtered),
        "monthly_trend": monthly_trend(filtered, today),
        "condominium_stats": condominium_stats(filtered),
        "recent_maintenance": recent_maintenance(filtered),
    }
