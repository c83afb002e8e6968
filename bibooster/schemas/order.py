"""
B.I Booster Backend — Order Schemas
=====================================

Order form body and order views for members.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class OrderCreateRequest(BaseModel):
    """Storefront order form: a package chosen for one template."""

    package_id: str = Field(min_length=1, max_length=50)
    template_name: str = Field(min_length=1, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(min_length=1, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("package_id")
    @classmethod
    def normalize_package_id(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("name", "phone", "template_name")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class OrderResponse(BaseModel):
    id: uuid.UUID
    package_id: str
    package_name: str
    price: str
    template_name: str
    template_path: Optional[str] = None
    notes: Optional[str] = None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderCreatedResponse(BaseModel):
    message: str = "We will contact you for payment verification within 1x24 hours."
    order: OrderResponse


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
