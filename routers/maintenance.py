# routers/maintenance.py

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from core.config import settings
from core.email_utils import send_email, smtp_configured
from core.errors import handle_supabase_error
from core.logging_config import get_logger
from core.storage import ALLOWED_IMAGE_TYPES, build_object_path, upload_public_file, validate_image
from core.supabase_helpers import ensure_reference_owned, fetch_owned, require_client
from core.utils import sanitize, utcnow
from dependencies.auth import CurrentUser, get_subscribed_user
from models.enums import ContactMethod, MaintenanceStatus, PhotoStage
from models.maintenance import (
    MaintenanceCreate,
    MaintenanceFinalize,
    MaintenanceStatusUpdate,
    MaintenanceUpdate,
    SupplierContactRequest,
    SupplierContactResponse,
)
from services.supplier_contact import (
    build_contact_message,
    contact_subject,
    mailto_link,
    whatsapp_digits,
    whatsapp_link,
)

logger = get_logger("maintenance")

router = APIRouter(
    prefix="/maintenance",
    tags=["Maintenance"],
)

TABLE = "maintenance_requests"
MAINTENANCE_SELECT = (
    "*, condominium:condominiums(id, name), supplier:suppliers(id, name, email, whatsapp)"
)

# current status → statuses it may move to
ALLOWED_TRANSITIONS = {
    MaintenanceStatus.open: {MaintenanceStatus.in_progress, MaintenanceStatus.completed},
    MaintenanceStatus.in_progress: {MaintenanceStatus.completed, MaintenanceStatus.open},
    MaintenanceStatus.completed: set(),
}


# ============================================================
# Helpers
# ============================================================
def status_change_fields(current_status: str, new_status: MaintenanceStatus, now: datetime) -> Dict[str, Any]:
    """
    Columns to write for a status change, or 400 when the move is not allowed.
    Completed requests are final.
    """
    current = MaintenanceStatus(current_status)

    if current == MaintenanceStatus.completed:
        raise HTTPException(400, "Completed maintenance requests cannot change status")
    if current == new_status:
        raise HTTPException(400, f"Maintenance request is already {new_status.value}")
    if new_status not in ALLOWED_TRANSITIONS[current]:
        raise HTTPException(400, f"Cannot change status from {current.value} to {new_status.value}")

    fields: Dict[str, Any] = {"status": new_status.value, "updated_at": now.isoformat()}
    if new_status == MaintenanceStatus.in_progress:
        fields["start_date"] = now.isoformat()
    elif new_status == MaintenanceStatus.completed:
        fields["completion_date"] = now.isoformat()
    else:
        fields["start_date"] = None
    return fields


def _check_references(client, user_id: str, data: Dict[str, Any]):
    ensure_reference_owned(client, "condominiums", data.get("condominium_id"), user_id, "condominium_id")
    ensure_reference_owned(client, "suppliers", data.get("supplier_id"), user_id, "supplier_id")


def _update_owned(client, maintenance_id: str, user_id: str, fields: Dict[str, Any], operation: str):
    try:
        result = (
            client.table(TABLE)
            .update(fields)
            .eq("id", maintenance_id)
            .eq("user_id", user_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, operation)

    if not result.data:
        raise HTTPException(404, "Maintenance request not found")
    return result.data[0]


def _fetch(client, maintenance_id: str, user_id: str) -> Dict[str, Any]:
    return fetch_owned(
        client, TABLE, maintenance_id, user_id,
        columns=MAINTENANCE_SELECT, label="Maintenance request",
    )


# ============================================================
# LIST / GET
# ============================================================
@router.get("", summary="List maintenance requests")
def list_maintenance(
    status: Optional[MaintenanceStatus] = None,
    condominium_id: Optional[str] = None,
    supplier_id: Optional[str] = None,
    search: Optional[str] = Query(None, description="Substring of title or description"),
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()

    try:
        query = client.table(TABLE).select(MAINTENANCE_SELECT).eq("user_id", current_user.id)

        if status:
            query = query.eq("status", status.value)
        if condominium_id:
            query = query.eq("condominium_id", condominium_id)
        if supplier_id:
            query = query.eq("supplier_id", supplier_id)
        if search and search.strip():
            # PostgREST or-filter syntax: commas and parentheses would break it
            term = search.strip().replace(",", " ").replace("(", " ").replace(")", " ")
            query = query.or_(f"title.ilike.%{term}%,description.ilike.%{term}%")

        result = query.order("opening_date", desc=True).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch maintenance requests")

    return {"success": True, "data": result.data or []}


@router.get("/{maintenance_id}", summary="Get maintenance request")
def get_maintenance(maintenance_id: str, current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()
    return {"success": True, "data": _fetch(client, maintenance_id, current_user.id)}


# ============================================================
# CREATE / UPDATE / DELETE
# ============================================================
@router.post("", status_code=201, summary="Create maintenance request")
def create_maintenance(
    payload: MaintenanceCreate,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()
    data = sanitize(payload.model_dump(mode="json"))
    _check_references(client, current_user.id, data)

    data.update({
        "user_id": current_user.id,
        "status": MaintenanceStatus.open.value,
        "opening_date": utcnow().isoformat(),
        "photos_before": [],
        "photos_after": [],
    })

    try:
        result = client.table(TABLE).insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to create maintenance request")

    if not result.data:
        raise HTTPException(500, "Failed to create maintenance request")

    logger.info(f"Maintenance request {result.data[0].get('id')} opened by {current_user.id}")
    return {"success": True, "data": result.data[0]}


@router.put("/{maintenance_id}", summary="Update maintenance request")
def update_maintenance(
    maintenance_id: str,
    payload: MaintenanceUpdate,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()
    fetch_owned(client, TABLE, maintenance_id, current_user.id, columns="id", label="Maintenance request")

    update_data = sanitize(payload.model_dump(mode="json", exclude_unset=True))
    # Required columns can't be nulled; optional ones can
    for key in ("title", "description", "condominium_id", "service_types"):
        if update_data.get(key) is None:
            update_data.pop(key, None)

    _check_references(client, current_user.id, update_data)
    update_data["updated_at"] = utcnow().isoformat()

    row = _update_owned(client, maintenance_id, current_user.id, update_data, "Failed to update maintenance request")
    return {"success": True, "data": row}


@router.delete("/{maintenance_id}", summary="Delete maintenance request")
def delete_maintenance(maintenance_id: str, current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()
    fetch_owned(client, TABLE, maintenance_id, current_user.id, columns="id", label="Maintenance request")

    try:
        client.table(TABLE).delete().eq("id", maintenance_id).eq("user_id", current_user.id).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete maintenance request")

    logger.info(f"Maintenance request {maintenance_id} deleted by {current_user.id}")
    return {"success": True, "deleted_id": maintenance_id}


# ============================================================
# WORKFLOW
# ============================================================
@router.patch("/{maintenance_id}/status", summary="Change maintenance status")
def change_status(
    maintenance_id: str,
    payload: MaintenanceStatusUpdate,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()
    current = fetch_owned(client, TABLE, maintenance_id, current_user.id, columns="id, status", label="Maintenance request")

    fields = status_change_fields(current["status"], payload.status, utcnow())
    row = _update_owned(client, maintenance_id, current_user.id, fields, "Failed to change status")

    logger.info(f"Maintenance {maintenance_id}: {current['status']} → {payload.status.value}")
    return {"success": True, "data": row}


@router.post("/{maintenance_id}/finalize", summary="Complete with the final value")
def finalize_maintenance(
    maintenance_id: str,
    payload: MaintenanceFinalize,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()
    current = fetch_owned(client, TABLE, maintenance_id, current_user.id, columns="id, status", label="Maintenance request")

    now = utcnow()
    fields = status_change_fields(current["status"], MaintenanceStatus.completed, now)
    fields["final_value"] = payload.final_value

    row = _update_owned(client, maintenance_id, current_user.id, fields, "Failed to finalize maintenance request")
    return {"success": True, "data": row}


# ============================================================
# PHOTOS
# ============================================================
@router.post("/{maintenance_id}/photos", summary="Upload before/after photos")
def upload_photos(
    maintenance_id: str,
    stage: PhotoStage = Query(...),
    files: List[UploadFile] = File(...),
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    """
    Every file is validated before anything is uploaded, so one bad file
    rejects the whole batch.
    """
    client = require_client()
    column = f"photos_{stage.value}"
    current = fetch_owned(client, TABLE, maintenance_id, current_user.id, columns=f"id, {column}", label="Maintenance request")

    uploads = []
    for upload in files:
        content = upload.file.read()
        validate_image(upload.content_type, len(content), upload.filename or "file")
        uploads.append((upload, content))

    urls = []
    for upload, content in uploads:
        path = build_object_path(stage.value, upload.filename or "photo", upload.content_type)
        try:
            url = upload_public_file(
                client,
                settings.MAINTENANCE_PHOTOS_BUCKET,
                path,
                content,
                upload.content_type,
                allowed_mime_types=list(ALLOWED_IMAGE_TYPES),
                file_size_limit=settings.PHOTO_MAX_BYTES,
            )
        except Exception as e:
            raise handle_supabase_error(e, "Failed to upload photo")
        urls.append(url)

    photos = list(current.get(column) or []) + urls
    row = _update_owned(
        client, maintenance_id, current_user.id,
        {column: photos, "updated_at": utcnow().isoformat()},
        "Failed to save photos",
    )

    logger.info(f"Uploaded {len(urls)} {stage.value} photos to maintenance {maintenance_id}")
    return {"success": True, "data": row, "uploaded": urls}


# ============================================================
# SUPPLIER CONTACT
# ============================================================
@router.post("/{maintenance_id}/contact", response_model=SupplierContactResponse, summary="Contact the assigned supplier")
def contact_supplier(
    maintenance_id: str,
    payload: SupplierContactRequest,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    client = require_client()
    request_row = _fetch(client, maintenance_id, current_user.id)

    supplier = request_row.get("supplier")
    if not request_row.get("supplier_id") or not supplier:
        raise HTTPException(400, "No supplier assigned to this maintenance request")

    message = build_contact_message(request_row, supplier)

    if payload.method == ContactMethod.whatsapp:
        if not whatsapp_digits(supplier.get("whatsapp")):
            raise HTTPException(400, "Supplier has no WhatsApp number")
        return SupplierContactResponse(
            method=payload.method,
            link=whatsapp_link(supplier["whatsapp"], message),
            message=message,
        )

    subject = contact_subject(request_row)
    email_sent = False
    if smtp_configured():
        try:
            email_sent = send_email(subject, message, [supplier.get("email")], reply_to=current_user.email)
        except Exception as e:
            logger.error(f"Supplier email for maintenance {maintenance_id} failed: {e}")

    return SupplierContactResponse(
        method=payload.method,
        link=mailto_link(supplier.get("email") or "", subject, message),
        message=message,
        email_sent=email_sent,
    )
