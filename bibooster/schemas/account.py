"""
B.I Booster Backend — Account Schemas
=======================================

Registration, login and the member session payload.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


class RegisterRequest(BaseModel):
    """
    Registration form body.

    Password/confirmation equality is a business rule checked by
    AccountService (400), not a schema rule (422), so the client gets the
    same error shape the login form uses.
    """

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=6, max_length=72)
    confirm_password: str = Field(max_length=72)

    @field_validator("name", "phone")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


class SessionUser(BaseModel):
    """The member session object: what the dashboard keeps for the logged-in member."""

    id: uuid.UUID
    name: str
    email: str
    package_access: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
    user: SessionUser


class AccountResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    phone: str
    status: str
    access_tier: str
    is_verified: bool
    has_paid: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    message: str = "Account created. Order a template package to activate LMS access."
    account: AccountResponse
