# core/supabase_helpers.py

from typing import Optional

from fastapi import HTTPException
from supabase import Client

from core.errors import handle_supabase_error
from core.supabase_client import get_supabase_client


# =================================================================
#  OWNER-SCOPED ACCESS
# =================================================================
# The API talks to Supabase with the service role, which bypasses RLS.
# These helpers re-apply the "user_id = auth.uid()" policy of every
# application table so routers never touch another user's rows.
# =================================================================

def require_client() -> Client:
    """Supabase client or 500 when credentials are missing."""
    client = get_supabase_client()
    if client is None:
        raise HTTPException(500, "Supabase client not configured")
    return client


def fetch_owned(
    client: Client,
    table: str,
    record_id: str,
    user_id: str,
    *,
    columns: str = "*",
    label: Optional[str] = None,
) -> dict:
    """
    Fetch one row of `table` owned by `user_id`.
    404 when missing or owned by someone else (never leak existence).
    """
    label = label or table.rstrip("s").replace("_", " ").capitalize()

    try:
        res = (
            client.table(table)
            .select(columns)
            .eq("id", record_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, f"Failed to fetch {label.lower()}")

    if not res.data:
        raise HTTPException(404, f"{label} not found")

    return res.data[0]


def ensure_reference_owned(client: Client, table: str, record_id: Optional[str], user_id: str, field: str):
    """
    WITH CHECK counterpart: a foreign key in a payload must point at one of
    the caller's own rows. 400 otherwise.
    """
    if not record_id:
        return

    try:
        res = (
            client.table(table)
            .select("id")
            .eq("id", record_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, f"Failed to validate {field}")

    if not res.data:
        raise HTTPException(400, f"Invalid {field}: not found for this account")
