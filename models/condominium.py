# models/condominium.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from .validators import required_text


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class CondominiumBase(BaseModel):
    name: str
    cnpj: str
    address: str
    mandate_period: str

    @field_validator("name", "cnpj", "address", "mandate_period", mode="before")
    def not_blank(cls, v, info):
        return required_text(v, info.field_name)


# -------------------------------------------------
# Create
# -------------------------------------------------
class CondominiumCreate(CondominiumBase):
    """
    Sent by the client when registering a condominium.
    id, user_id and created_at are set server-side.
    """
    pass


# -------------------------------------------------
# Update (PUT with partial payloads allowed)
# -------------------------------------------------
class CondominiumUpdate(BaseModel):
    name: Optional[str] = None
    cnpj: Optional[str] = None
    address: Optional[str] = None
    mandate_period: Optional[str] = None

    # Fields may be omitted, but not blanked
    @field_validator("name", "cnpj", "address", "mandate_period", mode="before")
    def not_blank_when_sent(cls, v, info):
        if v is None:
            return v
        return required_text(v, info.field_name)


# -------------------------------------------------
# Read (Supabase → API response)
# -------------------------------------------------
class CondominiumRead(CondominiumBase):
    id: str
    user_id: str
    created_at: Optional[datetime] = None

    @field_validator("id", "user_id", mode="before")
    def to_str(cls, v):
        return str(v)
