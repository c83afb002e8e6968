"""
B.I Booster Backend — Admin Console Schemas
=============================================

What:  Request and response models for the two admin handlers.
How:   AdminActionRequest is validated inside the verify route (not by
       FastAPI) so malformed bodies keep the handler's {"error": ...} shape.

The verification handler takes {action, userId, orderId}; both the
camelCase names the admin console sends and snake_case are accepted.
A missing action is allowed here and rejected as "Invalid action".
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from bibooster.schemas.order import OrderResponse


class AdminActionRequest(BaseModel):
    # Missing or null falls through to "Invalid action"
    action: Optional[str] = Field(
        default=None,
        description="verify_payment, get_pending_orders or get_verified_orders",
    )
    user_id: Optional[uuid.UUID] = Field(default=None, alias="userId")
    order_id: Optional[uuid.UUID] = Field(default=None, alias="orderId")

    model_config = {"populate_by_name": True}


class AdminOrderUser(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    phone: str
    status: str
    access_tier: str
    is_verified: bool
    has_paid: bool

    model_config = {"from_attributes": True}


class AdminOrderItem(BaseModel):
    """An order joined with the user who placed it."""

    id: uuid.UUID
    user_id: uuid.UUID
    package_id: str
    package_name: str
    price: str
    template_name: str
    template_path: Optional[str] = None
    notes: Optional[str] = None
    status: str
    created_at: datetime
    user: AdminOrderUser

    model_config = {"from_attributes": True}


class AdminOrdersResponse(BaseModel):
    orders: List[AdminOrderItem]


class VerifyPaymentResponse(BaseModel):
    success: bool = True
    message: str = "Payment verified successfully"


class TemplateDeliveryResponse(BaseModel):
    message: str = "Template delivered"
    order: OrderResponse
