# routers/reports.py

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from core.config import settings
from core.errors import handle_supabase_error
from core.logging_config import get_logger
from core.storage import upload_public_file
from core.supabase_helpers import fetch_owned, require_client
from dependencies.auth import CurrentUser, get_subscribed_user
from models.report import ReportCreate
from services.report_generator import (
    build_report_data,
    fetch_report_rows,
    generate_pdf_bytes,
    pdf_filename,
    resolve_period,
)

logger = get_logger("reports")

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)

TABLE = "reports"


def _store_pdf(client, report: dict) -> str:
    pdf = generate_pdf_bytes(report)
    path = f"{report['user_id']}/{report['id']}.pdf"
    return upload_public_file(
        client,
        settings.REPORTS_BUCKET,
        path,
        pdf,
        "application/pdf",
        allowed_mime_types=["application/pdf"],
    )


# ============================================================
# GENERATE
# ============================================================
@router.post("", status_code=201, summary="Generate a maintenance report")
def create_report(
    payload: ReportCreate,
    current_user: CurrentUser = Depends(get_subscribed_user),
):
    """
    Aggregates the caller's maintenance requests opened within the period
    (end date inclusive) and saves the result. With `store_pdf` the PDF is
    also uploaded and linked through `file_url`.
    """
    try:
        start, end = resolve_period(payload.type, payload.start_date, payload.end_date)
    except ValueError as e:
        raise HTTPException(400, str(e))

    client = require_client()

    try:
        rows = fetch_report_rows(client, current_user.id, start, end, payload.condominium_ids)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch maintenance requests")

    record = {
        "user_id": current_user.id,
        "title": payload.title,
        "type": payload.type.value,
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "condominium_ids": payload.condominium_ids,
        "data": build_report_data(rows),
    }

    try:
        result = client.table(TABLE).insert(record).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to save report")

    if not result.data:
        raise HTTPException(500, "Failed to save report")
    report = result.data[0]

    if payload.store_pdf:
        try:
            file_url = _store_pdf(client, report)
            client.table(TABLE).update({"file_url": file_url}).eq("id", report["id"]).execute()
        except Exception as e:
            raise handle_supabase_error(e, "Failed to store report PDF")
        report["file_url"] = file_url

    logger.info(
        f"Report {report.get('id')} generated for {current_user.id}: "
        f"{len(rows)} requests {start} → {end}"
    )
    return {"success": True, "data": report}


# ============================================================
# READ / DELETE
# ============================================================
@router.get("", summary="List reports")
def list_reports(current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()

    try:
        result = (
            client.table(TABLE)
            .select("id, title, type, start_date, end_date, condominium_ids, file_url, created_at")
            .eq("user_id", current_user.id)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch reports")

    return {"success": True, "data": result.data or []}


@router.get("/{report_id}", summary="Get report")
def get_report(report_id: str, current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()
    return {"success": True, "data": fetch_owned(client, TABLE, report_id, current_user.id, label="Report")}


@router.get("/{report_id}/pdf", summary="Download report as PDF")
def download_report_pdf(report_id: str, current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()
    report = fetch_owned(client, TABLE, report_id, current_user.id, label="Report")

    pdf = generate_pdf_bytes(report)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename()}"'},
    )


@router.delete("/{report_id}", summary="Delete report")
def delete_report(report_id: str, current_user: CurrentUser = Depends(get_subscribed_user)):
    client = require_client()
    fetch_owned(client, TABLE, report_id, current_user.id, columns="id", label="Report")

    try:
        client.table(TABLE).delete().eq("id", report_id).eq("user_id", current_user.id).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to delete report")

    return {"success": True, "deleted_id": report_id}
