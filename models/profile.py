# models/profile.py

from pydantic import BaseModel, field_validator

from .validators import valid_email


class ProfileUpdate(BaseModel):
    name: str
    email: str

    @field_validator("name", mode="before")
    def name_length(cls, v):
        name = (v or "").strip()
        if len(name) < 2:
            raise ValueError("Name must have at least 2 characters")
        return name

    @field_validator("email", mode="before")
    def email_format(cls, v):
        return valid_email(v)
