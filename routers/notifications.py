# routers/notifications.py

from fastapi import APIRouter, Depends, HTTPException

from core.errors import handle_supabase_error
from core.supabase_helpers import fetch_owned, require_client
from dependencies.auth import CurrentUser, get_subscribed_user

router = APIRouter(
    prefix="/notifications",
    tags=["Notifications"],
)

TABLE = "notifications"


@router.get("", summary="List notifications")
def list_notifications(
    unread_only: bool = False,
    limit: int = 50,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()

    try:
        query = client.table(TABLE).select("*").eq("user_id", current_user.id)
        if unread_only:
            query = query.eq("read", False)
        result = query.order("created_at", desc=True).limit(limit).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch notifications")

    return {"success": True, "data": result.data or []}


@router.get("/unread-count", summary="Number of unread notifications")
def unread_count(current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()

    try:
        result = (
            client.table(TABLE)
            .select("id", count="exact")
            .eq("user_id", current_user.id)
            .eq("read", False)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to count notifications")

    count = result.count if result.count is not None else len(result.data or [])
    return {"success": True, "data": {"unread": count}}


@router.post("/read-all", summary="Mark every notification as read")
def mark_all_read(current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()

    try:
        result = (
            client.table(TABLE)
            .update({"read": True})
            .eq("user_id", current_user.id)
            .eq("read", False)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update notifications")

    return {"success": True, "updated": len(result.data or [])}


@router.patch("/{notification_id}/read", summary="Mark notification as read")
def mark_read(notification_id: str, current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()

    try:
        result = (
            client.table(TABLE)
            .update({"read": True})
            .eq("id", notification_id)
            .eq("user_id", current_user.id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to update notification")

    if not result.data:
        raise HTTPException(404, "Notification not found")
    return {"success": True, "data": result.data[0]}


@router.delete("/{notification_id}", summary="Delete notification")
def delete_notification(notification_id: str, current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()
    fetch_owned(client, TABLE, notification_id, current_user.id, columns="id", label="Notification")

    try:
        client.table(TABLE).delete().eq("id", notification_id).eq("user_id", current_user.id).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete notification")

    return {"success": True, "deleted_id": notification_id}
