# models/maintenance.py

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .enums import ContactMethod, MaintenanceStatus, ServiceType
from .validators import optional_text, required_text, unique_service_types


# -------------------------------------------------
# Create
# -------------------------------------------------
class MaintenanceCreate(BaseModel):
    """
    New maintenance request. Status, opening_date and user_id are
    always set by the server (status starts as "open").
    """
    title: str
    description: str
    condominium_id: str
    supplier_id: Optional[str] = None
    service_types: List[ServiceType]
    notes: Optional[str] = None
    estimated_value: Optional[float] = Field(None, ge=0)

    @field_validator("title", "description", "condominium_id", mode="before")
    def not_blank(cls, v, info):
        return required_text(v, info.field_name)

    @field_validator("supplier_id", "notes", mode="before")
    def blank_to_none(cls, v):
        return optional_text(v)

    @field_validator("service_types")
    def service_types_unique(cls, v):
        return unique_service_types(v)


# -------------------------------------------------
# Update (status has its own endpoint)
# -------------------------------------------------
class MaintenanceUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    condominium_id: Optional[str] = None
    supplier_id: Optional[str] = None
    service_types: Optional[List[ServiceType]] = None
    notes: Optional[str] = None
    estimated_value: Optional[float] = Field(None, ge=0)

    @field_validator("title", "description", "condominium_id", mode="before")
    def not_blank_when_sent(cls, v, info):
        return v if v is None else required_text(v, info.field_name)

    @field_validator("service_types")
    def service_types_unique(cls, v):
        return v if v is None else unique_service_types(v)


class MaintenanceStatusUpdate(BaseModel):
    status: MaintenanceStatus


class MaintenanceFinalize(BaseModel):
    final_value: float = Field(..., ge=0)


class SupplierContactRequest(BaseModel):
    method: ContactMethod


class SupplierContactResponse(BaseModel):
    method: ContactMethod
    link: str
    message: str
    email_sent: bool = False
