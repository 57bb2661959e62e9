# routers/suppliers.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from core.errors import handle_supabase_error
from core.logging_config import logger
from core.supabase_helpers import fetch_owned, require_client
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_subscribed_user
from models.enums import ServiceType
from models.supplier import SupplierCreate, SupplierRead, SupplierUpdate

router = APIRouter(
    prefix="/suppliers",
    tags=["Suppliers"],
)

TABLE = "suppliers"


@router.get("", summary="List suppliers")
def list_suppliers(
    service_type: Optional[ServiceType] = None,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()

    try:
        query = client.table(TABLE).select("*").eq("user_id", current_user.id)
        if service_type:
            query = query.contains("service_types", [service_type.value])
        result = query.order("name").execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch suppliers")

    return {"success": True, "data": result.data or []}


@router.get("/{supplier_id}", response_model=SupplierRead, summary="Get supplier")
def get_supplier(supplier_id: str, current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()
    return fetch_owned(client, TABLE, supplier_id, current_user.id, label="Supplier")


@router.post("", response_model=SupplierRead, status_code=201, summary="Create supplier")
def create_supplier(
    payload: SupplierCreate,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()
    data = sanitize(payload.model_dump(mode="json"))
    data["user_id"] = current_user.id

    try:
        result = client.table(TABLE).insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create supplier")

    if not result.data:
        raise HTTPException(500, "Failed to create supplier")

    logger.info(f"Supplier {result.data[0].get('id')} created by {current_user.id}")
    return result.data[0]


@router.put("/{supplier_id}", response_model=SupplierRead, summary="Update supplier")
def update_supplier(
    supplier_id: str,
    payload: SupplierUpdate,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()
    current = fetch_owned(client, TABLE, supplier_id, current_user.id, label="Supplier")

    update_data = sanitize(payload.model_dump(mode="json", exclude_unset=True))
    # Only whatsapp may be cleared
    update_data = {k: v for k, v in update_data.items() if v is not None or k == "whatsapp"}
    if not update_data:
        return current

    try:
        result = (
            client.table(TABLE)
            .update(update_data)
            .eq("id", supplier_id)
            .eq("user_id", current_user.id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update supplier")

    return result.data[0] if result.data else {**current, **update_data}


@router.delete("/{supplier_id}", summary="Delete supplier")
def delete_supplier(supplier_id: str, current_user: CurrentUser = Depends(get_subscribed_user)):
    """Maintenance requests keep existing with supplier_id set to null."""
    client = require_client()
    fetch_owned(client, TABLE, supplier_id, current_user.id, columns="id", label="Supplier")

    try:
        client.table(TABLE).delete().eq("id", supplier_id).eq("user_id", current_user.id).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete supplier")

    logger.info(f"Supplier {supplier_id} deleted by {current_user.id}")
    return {"success": True, "deleted_id": supplier_id}
