# routers/condominiums.py

from fastapi import APIRouter, Depends, HTTPException

from core.cache import cache_get, cache_set, invalidate_user, user_key
from core.errors import handle_supabase_error
from core.logging_config import logger
from core.supabase_helpers import fetch_owned, require_client
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_subscribed_user
from models.condominium import CondominiumCreate, CondominiumRead, CondominiumUpdate

router = APIRouter(
    prefix="/condominiums",
    tags=["Condominiums"],
)

TABLE = "condominiums"
CACHE_NAMESPACE = "condominiums"
CACHE_TTL_SECONDS = 300


# ============================================================
# LIST (cached per user)
# ============================================================
@router.get("", summary="List condominiums")
def list_condominiums(current_user: CurrentUser = Depends(get_subscribed_user)):
    cache_key = user_key(CACHE_NAMESPACE, current_user.id, "list")
    cached = cache_get(cache_key)
    if cached is not None:
        return {"success": True, "data": cached}

    client = require_client()

    try:
        result = (
            client.table(TABLE)
            .select("*")
            .eq("user_id", current_user.id)
            .order("name")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch condominiums")

    rows = result.data or []
    cache_set(cache_key, rows, ttl_seconds=CACHE_TTL_SECONDS)
    return {"success": True, "data": rows}


@router.get("/{condominium_id}", response_model=CondominiumRead, summary="Get condominium")
def get_condominium(condominium_id: str, current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()
    return fetch_owned(client, TABLE, condominium_id, current_user.id, label="Condominium")


# ============================================================
# CREATE / UPDATE / DELETE
# ============================================================
@router.post("", response_model=CondominiumRead, status_code=201, summary="Create condominium")
def create_condominium(
    payload: CondominiumCreate,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()
    data = sanitize(payload.model_dump())
    data["user_id"] = current_user.id

    try:
        result = client.table(TABLE).insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create condominium")

    if not result.data:
        raise HTTPException(500, "Failed to create condominium")

    invalidate_user(CACHE_NAMESPACE, current_user.id)
    logger.info(f"Condominium {result.data[0].get('id')} created by {current_user.id}")
    return result.data[0]


@router.put("/{condominium_id}", response_model=CondominiumRead, summary="Update condominium")
def update_condominium(
    condominium_id: str,
    payload: CondominiumUpdate,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()
    current = fetch_owned(client, TABLE, condominium_id, current_user.id, label="Condominium")

    update_data = sanitize(payload.model_dump(exclude_unset=True, exclude_none=True))
    if not update_data:
        return current

    try:
        result = (
            client.table(TABLE)
            .update(update_data)
            .eq("id", condominium_id)
            .eq("user_id", current_user.id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update condominium")

    invalidate_user(CACHE_NAMESPACE, current_user.id)
    return result.data[0] if result.data else {**current, **update_data}


@router.delete("/{condominium_id}", summary="Delete condominium")
def delete_condominium(condominium_id: str, current_user: CurrentUser = Depends(get_subscribed_user)):
    """Its maintenance requests are removed by the database cascade."""
    client = require_client()
    fetch_owned(client, TABLE, condominium_id, current_user.id, columns="id", label="Condominium")

    try:
        client.table(TABLE).delete().eq("id", condominium_id).eq("user_id", current_user.id).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete condominium")

    invalidate_user(CACHE_NAMESPACE, current_user.id)
    logger.info(f"Condominium {condominium_id} deleted by {current_user.id}")
    return {"success": True, "deleted_id": condominium_id}
