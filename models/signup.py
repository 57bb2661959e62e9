# models/signup.py

from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from .validators import valid_email


# --------------------------------------------------------------------
# PUBLIC SIGNUP FORM: account + chosen plan, paid through Stripe
# --------------------------------------------------------------------
class SignupCreate(BaseModel):
    name: str
    email: str
    password: str
    confirm_password: str
    price_id: str

    @field_validator("name", mode="before")
    def name_length(cls, v):
        name = (v or "").strip()
        if len(name) < 2:
            raise ValueError("Name must have at least 2 characters")
        return name

    @field_validator("email", mode="before")
    def email_format(cls, v):
        return valid_email(v)

    @field_validator("password")
    def password_length(cls, v):
        if len(v) < 6:
            raise ValueError("Password must have at least 6 characters")
        return v

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class SignupResponse(BaseModel):
    user_id: str
    checkout_url: str
    session_id: str


class SignupConfirm(BaseModel):
    session_id: str


class CheckoutRequest(BaseModel):
    price_id: Optional[str] = None
