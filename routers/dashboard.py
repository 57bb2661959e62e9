# routers/dashboard.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.errors import handle_supabase_error
from core.supabase_helpers import require_client
from dependencies.auth import CurrentUser, get_subscribed_user
from services.dashboard import build_dashboard

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)

DASHBOARD_SELECT = "*, condominium:condominiums(name), supplier:suppliers(name)"


def _fetch_all(client, table: str, user_id: str, columns: str = "*"):
    return (
        client.table(table)
        .select(columns)
        .eq("user_id", user_id)
        .execute()
    ).data or []


@router.get("", summary="Dashboard statistics")
def get_dashboard(
    condominium_id: Optional[str] = Query(None, description='Condominium id or "all"'),
    supplier_id: Optional[str] = Query(None, description='Supplier id or "all"'),
    service_type: Optional[str] = Query(None, description='Service type or "all"'),
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()

    try:
        condominiums = _fetch_all(client, "condominiums", current_user.id, "id")
        suppliers = _fetch_all(client, "suppliers", current_user.id, "id")
        requests = _fetch_all(client, "maintenance_requests", current_user.id, DASHBOARD_SELECT)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load dashboard")

    data = build_dashboard(
        condominiums,
        suppliers,
        requests,
        condominium_id=condominium_id,
        supplier_id=supplier_id,
        service_type=service_type,
    )
    return {"success": True, "data": data}
