# models/supplier.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from .enums import ServiceType
from .validators import optional_text, required_text, unique_service_types, valid_email


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class SupplierBase(BaseModel):
    name: str
    service_types: List[ServiceType]
    document: str                     # CNPJ or CPF, stored as typed
    email: str
    phone: str
    whatsapp: Optional[str] = None
    address: str

    @field_validator("name", "document", "phone", "address", mode="before")
    def not_blank(cls, v, info):
        return required_text(v, info.field_name)

    @field_validator("email", mode="before")
    def email_format(cls, v):
        return valid_email(v)

    @field_validator("whatsapp", mode="before")
    def whatsapp_optional(cls, v):
        return optional_text(v)

    @field_validator("service_types")
    def service_types_unique(cls, v):
        return unique_service_types(v)


class SupplierCreate(SupplierBase):
    pass


# -------------------------------------------------
# Update: omitted fields keep their stored value
# -------------------------------------------------
class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    service_types: Optional[List[ServiceType]] = None
    document: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name", "document", "phone", "address", mode="before")
    def not_blank_when_sent(cls, v, info):
        return v if v is None else required_text(v, info.field_name)

    @field_validator("email", mode="before")
    def email_format(cls, v):
        return v if v is None else valid_email(v)

    @field_validator("service_types")
    def service_types_unique(cls, v):
        return v if v is None else unique_service_types(v)


class SupplierRead(SupplierBase):
    id: str
    user_id: str
    created_at: Optional[datetime] = None

    @field_validator("id", "user_id", mode="before")
    def to_str(cls, v):
        return str(v)
