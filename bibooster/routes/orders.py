"""
B.I Booster Backend — Order Routes
====================================

The storefront order form (public) and the member's order list.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from bibooster.database import get_db_session
from bibooster.dependencies import get_current_member
from bibooster.models.user import User
from bibooster.schemas.common import ErrorResponse
from bibooster.schemas.order import (
    OrderCreateRequest,
    OrderCreatedResponse,
    OrderListResponse,
)
from bibooster.services.order_service import order_service

router = APIRouter(prefix="/api", tags=["Orders"])


@router.post(
    "/orders",
    response_model=OrderCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Unknown package", "model": ErrorResponse}},
    summary="Order a template package",
)
async def create_order(
    body: OrderCreateRequest,
    db: AsyncSession = Depends(get_db_session),
) -> OrderCreatedResponse:
    return await order_service.create_order(db, body)


@router.get(
    "/me/orders",
    response_model=OrderListResponse,
    responses={401: {"description": "Not logged in", "model": ErrorResponse}},
    summary="The logged-in member's orders and delivered templates",
)
async def my_orders(
    member: User = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> OrderListResponse:
    return await order_service.list_member_orders(db, member)
