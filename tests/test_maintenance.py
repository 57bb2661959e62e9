# tests/test_maintenance.py

"""
Tests for maintenance requests: validation, workflow, photos and supplier contact.
"""

import inspect
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from pydantic import ValidationError

from core.config import settings
from core.storage import build_object_path, upload_public_file
from models.enums import MaintenanceStatus
from models.maintenance import MaintenanceCreate
from routers.maintenance import status_change_fields, upload_photos

NOW = datetime(2025, 3, 10, 14, 0, tzinfo=timezone.utc)

NEW_REQUEST = {
    "title": "Vazamento na garagem",
    "description": "Cano estourado no subsolo",
    "condominium_id": "condo-1",
    "supplier_id": "sup-1",
    "service_types": ["Hidráulica"],
    "estimated_value": 350.0,
}

STORED = {
    "id": "m-1",
    "user_id": "user-1",
    "title": "Vazamento na garagem",
    "description": "Cano estourado no subsolo",
    "condominium_id": "condo-1",
    "supplier_id": "sup-1",
    "service_types": ["Hidráulica", "Obras"],
    "status": "open",
    "notes": "Urgente",
    "opening_date": "2025-03-01T09:30:00+00:00",
    "photos_before": ["https://cdn/before/1.jpg"],
    "photos_after": [],
    "condominium": {"id": "condo-1", "name": "Residencial Aurora"},
    "supplier": {"id": "sup-1", "name": "Hidro Já", "email": "hidro@ja.com", "whatsapp": "+55 (11) 98888-7777"},
}


# ============================================================
# Validation
# ============================================================
def test_estimated_value_cannot_be_negative():
    with pytest.raises(ValidationError):
        MaintenanceCreate(**{**NEW_REQUEST, "estimated_value": -1})


def test_service_types_required():
    with pytest.raises(ValidationError):
        MaintenanceCreate(**{**NEW_REQUEST, "service_types": []})


def test_blank_supplier_becomes_none():
    request = MaintenanceCreate(**{**NEW_REQUEST, "supplier_id": ""})

    assert request.supplier_id is None


# ============================================================
# Status transitions
# ============================================================
def test_start_sets_start_date():
    fields = status_change_fields("open", MaintenanceStatus.in_progress, NOW)

    assert fields["status"] == "in_progress"
    assert fields["start_date"] == NOW.isoformat()


@pytest.mark.parametrize("current", ["open", "in_progress"])
def test_complete_sets_completion_date(current):
    fields = status_change_fields(current, MaintenanceStatus.completed, NOW)

    assert fields["completion_date"] == NOW.isoformat()


def test_reopen_from_in_progress():
    fields = status_change_fields("in_progress", MaintenanceStatus.open, NOW)

    assert fields["status"] == "open"
    assert fields["start_date"] is None


@pytest.mark.parametrize("target", [MaintenanceStatus.open, MaintenanceStatus.in_progress])
def test_completed_is_final(target):
    with pytest.raises(HTTPException) as exc:
        status_change_fields("completed", target, NOW)

    assert exc.value.status_code == 400


def test_same_status_rejected():
    with pytest.raises(HTTPException):
        status_change_fields("open", MaintenanceStatus.open, NOW)


# ============================================================
# Endpoints
# ============================================================
def test_create_maintenance_starts_open(auth_client: TestClient, make_query, make_client):
    requests = make_query([{**STORED, "status": "open"}])
    supabase = make_client({
        "condominiums": make_query([{"id": "condo-1"}]),
        "suppliers": make_query([{"id": "sup-1"}]),
        "maintenance_requests": requests,
    })

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.post("/maintenance", json=NEW_REQUEST)

    assert response.status_code == 201
    inserted = requests.insert.call_args[0][0]
    assert inserted["status"] == "open"
    assert inserted["user_id"] == "user-1"
    assert inserted["opening_date"]
    assert inserted["photos_before"] == [] and inserted["photos_after"] == []


def test_create_maintenance_rejects_foreign_condominium(auth_client: TestClient, make_query, make_client):
    requests = make_query([])
    supabase = make_client({
        "condominiums": make_query([]),
        "suppliers": make_query([{"id": "sup-1"}]),
        "maintenance_requests": requests,
    })

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.post("/maintenance", json=NEW_REQUEST)

    assert response.status_code == 400
    assert "condominium_id" in response.json()["detail"]
    requests.insert.assert_not_called()


def test_list_maintenance_filters(auth_client: TestClient, make_query, make_client):
    requests = make_query([STORED])
    supabase = make_client({"maintenance_requests": requests})

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.get("/maintenance", params={"status": "open", "search": "cano"})

    assert response.status_code == 200
    requests.eq.assert_any_call("user_id", "user-1")
    requests.eq.assert_any_call("status", "open")
    requests.or_.assert_called_once_with("title.ilike.%cano%,description.ilike.%cano%")
    requests.order.assert_called_once_with("opening_date", desc=True)


def test_finalize_completed_request_rejected(auth_client: TestClient, make_query, make_client):
    requests = make_query([{"id": "m-1", "status": "completed"}])
    supabase = make_client({"maintenance_requests": requests})

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.post("/maintenance/m-1/finalize", json={"final_value": 500})

    assert response.status_code == 400
    requests.update.assert_not_called()


def test_finalize_sets_value_and_completion(auth_client: TestClient, make_query, make_client):
    requests = make_query([{"id": "m-1", "status": "in_progress"}], [{**STORED, "status": "completed"}])
    supabase = make_client({"maintenance_requests": requests})

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.post("/maintenance/m-1/finalize", json={"final_value": 480.5})

    assert response.status_code == 200
    fields = requests.update.call_args[0][0]
    assert fields["status"] == "completed"
    assert fields["final_value"] == 480.5
    assert fields["completion_date"]


def test_update_never_nulls_required_columns(auth_client: TestClient, make_query, make_client):
    requests = make_query([{"id": "m-1"}], [STORED])
    supabase = make_client({"maintenance_requests": requests})

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.put(
            "/maintenance/m-1",
            json={"title": None, "condominium_id": None, "notes": None, "supplier_id": None},
        )

    assert response.status_code == 200
    fields = requests.update.call_args[0][0]
    assert "title" not in fields
    assert "condominium_id" not in fields
    assert fields["notes"] is None
    assert fields["supplier_id"] is None
    assert fields["updated_at"]
    requests.eq.assert_any_call("user_id", "user-1")


def test_update_rejects_supplier_of_another_account(auth_client: TestClient, make_query, make_client):
    requests = make_query([{"id": "m-1"}])
    supabase = make_client({
        "maintenance_requests": requests,
        "suppliers": make_query([]),
    })

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.put("/maintenance/m-1", json={"supplier_id": "sup-other"})

    assert response.status_code == 400
    assert "supplier_id" in response.json()["detail"]
    requests.update.assert_not_called()


def test_change_status_starts_work(auth_client: TestClient, make_query, make_client):
    requests = make_query([{"id": "m-1", "status": "open"}], [{**STORED, "status": "in_progress"}])
    supabase = make_client({"maintenance_requests": requests})

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.patch("/maintenance/m-1/status", json={"status": "in_progress"})

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "in_progress"
    fields = requests.update.call_args[0][0]
    assert fields["status"] == "in_progress"
    assert fields["start_date"]


def test_change_status_of_completed_request_rejected(auth_client: TestClient, make_query, make_client):
    requests = make_query([{"id": "m-1", "status": "completed"}])
    supabase = make_client({"maintenance_requests": requests})

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.patch("/maintenance/m-1/status", json={"status": "open"})

    assert response.status_code == 400
    requests.update.assert_not_called()


def test_change_status_unknown_value_is_422(auth_client: TestClient):
    response = auth_client.patch("/maintenance/m-1/status", json={"status": "archived"})

    assert response.status_code == 422


# ============================================================
# Photos
# ============================================================
def test_upload_photos_appends_urls(auth_client: TestClient, make_query, make_client):
    requests = make_query(
        [{"id": "m-1", "photos_before": ["https://cdn/before/1.jpg"]}],
        [STORED],
    )
    supabase = make_client({"maintenance_requests": requests})

    with patch("routers.maintenance.require_client", return_value=supabase), \
         patch("routers.maintenance.upload_public_file", return_value="https://cdn/before/2.jpg") as mock_upload:
        response = auth_client.post(
            "/maintenance/m-1/photos",
            params={"stage": "before"},
            files=[("files", ("foto.jpg", b"\xff\xd8\xff", "image/jpeg"))],
        )

    assert response.status_code == 200
    path = mock_upload.call_args[0][2]
    assert path.startswith("before/") and path.endswith(".jpg")
    assert mock_upload.call_args.kwargs["file_size_limit"] == settings.PHOTO_MAX_BYTES
    fields = requests.update.call_args[0][0]
    assert fields["photos_before"] == ["https://cdn/before/1.jpg", "https://cdn/before/2.jpg"]


def test_photo_upload_runs_in_threadpool():
    assert not inspect.iscoroutinefunction(upload_photos)


def test_upload_rejects_non_images(auth_client: TestClient, make_query, make_client):
    requests = make_query([{"id": "m-1", "photos_after": []}])
    supabase = make_client({"maintenance_requests": requests})

    with patch("routers.maintenance.require_client", return_value=supabase), \
         patch("routers.maintenance.upload_public_file") as mock_upload:
        response = auth_client.post(
            "/maintenance/m-1/photos",
            params={"stage": "after"},
            files=[("files", ("doc.pdf", b"%PDF", "application/pdf"))],
        )

    assert response.status_code == 400
    mock_upload.assert_not_called()


def test_upload_rejects_oversized_images(auth_client: TestClient, make_query, make_client):
    requests = make_query([{"id": "m-1", "photos_after": []}])
    supabase = make_client({"maintenance_requests": requests})

    with patch("routers.maintenance.require_client", return_value=supabase), \
         patch.object(settings, "PHOTO_MAX_BYTES", 4), \
         patch("routers.maintenance.upload_public_file") as mock_upload:
        response = auth_client.post(
            "/maintenance/m-1/photos",
            params={"stage": "after"},
            files=[("files", ("big.png", b"123456", "image/png"))],
        )

    assert response.status_code == 400
    mock_upload.assert_not_called()


def test_missing_bucket_is_created_and_upload_retried():
    bucket = MagicMock()
    bucket.upload.side_effect = [Exception("Bucket not found"), None]
    bucket.get_public_url.return_value = "https://cdn/maintenance-photos/before/x.jpg"
    supabase = MagicMock()
    supabase.storage.from_.return_value = bucket

    url = upload_public_file(
        supabase, "maintenance-photos", "before/x.jpg", b"data", "image/jpeg",
        allowed_mime_types=["image/jpeg"], file_size_limit=1024,
    )

    assert url == "https://cdn/maintenance-photos/before/x.jpg"
    supabase.storage.create_bucket.assert_called_once()
    options = supabase.storage.create_bucket.call_args.kwargs["options"]
    assert options == {"public": True, "file_size_limit": 1024, "allowed_mime_types": ["image/jpeg"]}
    assert bucket.upload.call_count == 2


def test_bucket_created_without_size_limit_when_none_given():
    bucket = MagicMock()
    bucket.upload.side_effect = [Exception({"message": "Bucket not found"}), None]
    bucket.get_public_url.return_value = "https://cdn/reports/user-1/r1.pdf"
    supabase = MagicMock()
    supabase.storage.from_.return_value = bucket

    upload_public_file(supabase, "reports", "user-1/r1.pdf", b"%PDF", "application/pdf")

    options = supabase.storage.create_bucket.call_args.kwargs["options"]
    assert "file_size_limit" not in options


def test_object_path_format():
    path = build_object_path("after", "IMG_001.PNG", "image/png")

    folder, name = path.split("/")
    millis, rest = name.split("-", 1)
    assert folder == "after"
    assert millis.isdigit()
    assert rest.endswith(".png")


# ============================================================
# Supplier contact
# ============================================================
def test_contact_whatsapp_link(auth_client: TestClient, make_query, make_client):
    supabase = make_client({"maintenance_requests": make_query([STORED])})

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.post("/maintenance/m-1/contact", json={"method": "whatsapp"})

    assert response.status_code == 200
    data = response.json()
    assert data["link"].startswith("https://wa.me/5511988887777?text=")
    assert "Residencial Aurora" in data["message"]
    assert "01/03/2025" in data["message"]
    assert "Hidráulica, Obras" in data["message"]
    assert "Urgente" in data["message"]


def test_contact_email_link_without_smtp(auth_client: TestClient, make_query, make_client):
    supabase = make_client({"maintenance_requests": make_query([STORED])})

    with patch("routers.maintenance.require_client", return_value=supabase), \
         patch("routers.maintenance.smtp_configured", return_value=False), \
         patch("routers.maintenance.send_email") as mock_send:
        response = auth_client.post("/maintenance/m-1/contact", json={"method": "email"})

    assert response.status_code == 200
    data = response.json()
    assert data["link"].startswith("mailto:hidro@ja.com?subject=")
    assert data["email_sent"] is False
    mock_send.assert_not_called()


def test_contact_email_sent_when_smtp_configured(auth_client: TestClient, make_query, make_client):
    supabase = make_client({"maintenance_requests": make_query([STORED])})

    with patch("routers.maintenance.require_client", return_value=supabase), \
         patch("routers.maintenance.smtp_configured", return_value=True), \
         patch("routers.maintenance.send_email", return_value=True) as mock_send:
        response = auth_client.post("/maintenance/m-1/contact", json={"method": "email"})

    assert response.json()["email_sent"] is True
    assert mock_send.call_args[0][2] == ["hidro@ja.com"]


def test_contact_without_supplier(auth_client: TestClient, make_query, make_client):
    row = {**STORED, "supplier_id": None, "supplier": None}
    supabase = make_client({"maintenance_requests": make_query([row])})

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.post("/maintenance/m-1/contact", json={"method": "email"})

    assert response.status_code == 400


def test_contact_whatsapp_requires_number(auth_client: TestClient, make_query, make_client):
    row = {**STORED, "supplier": {**STORED["supplier"], "whatsapp": None}}
    supabase = make_client({"maintenance_requests": make_query([row])})

    with patch("routers.maintenance.require_client", return_value=supabase):
        response = auth_client.post("/maintenance/m-1/contact", json={"method": "whatsapp"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Supplier has no WhatsApp number"
