# routers/profile.py

from fastapi import APIRouter, Depends

from core.errors import handle_supabase_error
from core.logging_config import logger
from core.supabase_helpers import require_client
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_current_user
from models.profile import ProfileUpdate
from services.provisioning import ensure_profile

router = APIRouter(
    prefix="/profile",
    tags=["Profile"],
)


@router.get("", summary="Current user's profile")
def get_profile(current_user: CurrentUser = Depends(get_current_user)):
    """Created on first read from the signup name (or the email's local part)."""
    client = require_client()

    try:
        profile = ensure_profile(client, current_user.id, current_user.email, current_user.name)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to load profile")

    return {"success": True, "data": profile}


@router.put("", summary="Update current user's profile")
def update_profile(
    payload: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    client = require_client()
    data = sanitize(payload.model_dump())

    try:
        ensure_profile(client, current_user.id, current_user.email, current_user.name)
        result = (
            client.table("profiles")
            .update(data)
            .eq("id", current_user.id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update profile")

    logger.info(f"User {current_user.id} updated their profile")
    return {"success": True, "data": result.data[0] if result.data else data}
