"""
B.I Booster Backend — Admin Service
=====================================

What:  The admin console's two handlers: payment verification (dispatched
       on a string `action`) and template delivery.
How:   Each action is a filtered SELECT or one or two unconditional UPDATE
       statements. There are no status guards: verifying an order twice
       simply writes the same values again.
Who:   Admin routes (behind the X-Admin-Key check).

Actions:
    verify_payment       user → has_paid, is_verified, status active,
                         access_tier from the order (+ default password
                         if none); order → paid
    get_pending_orders   orders with status pending, newest first, with user
    get_verified_orders  orders with status paid/completed, newest first
"""

import logging
import uuid
from typing import Optional, Union
from urllib.parse import urlparse

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bibooster.config import settings
from bibooster.exceptions import (
    DatabaseError,
    InvalidActionError,
    NotFoundError,
    ValidationError,
)
from bibooster.models.order import (
    ORDER_STATUS_COMPLETED,
    ORDER_STATUS_PAID,
    ORDER_STATUS_PENDING,
    Order,
)
from bibooster.models.user import USER_STATUS_ACTIVE, User
from bibooster.schemas.admin import (
    AdminActionRequest,
    AdminOrderItem,
    AdminOrdersResponse,
    TemplateDeliveryResponse,
    VerifyPaymentResponse,
)
from bibooster.schemas.order import OrderResponse
from bibooster.security import hash_password
from bibooster.services.file_service import file_service

logger = logging.getLogger(__name__)

ACTION_VERIFY_PAYMENT = "verify_payment"
ACTION_GET_PENDING_ORDERS = "get_pending_orders"
ACTION_GET_VERIFIED_ORDERS = "get_verified_orders"

ActionResult = Union[VerifyPaymentResponse, AdminOrdersResponse]


class AdminService:

    async def handle_action(self, db: AsyncSession, request: AdminActionRequest) -> ActionResult:
        """
        Dispatch one admin action.

        Raises:
            InvalidActionError: unknown action
            ValidationError:    verify_payment without userId/orderId
            DatabaseError:      any query failure (session rolled back)
        """
        logger.info("Admin action: %s", request.action)
        if request.action == ACTION_VERIFY_PAYMENT:
            if request.user_id is None or request.order_id is None:
                raise ValidationError(
                    message="userId and orderId are required for verify_payment",
                    field="userId" if request.user_id is None else "orderId",
                )
            return await self.verify_payment(db, request.user_id, request.order_id)
        if request.action == ACTION_GET_PENDING_ORDERS:
            return await self.list_orders(db, [ORDER_STATUS_PENDING])
        if request.action == ACTION_GET_VERIFIED_ORDERS:
            return await self.list_orders(db, [ORDER_STATUS_PAID, ORDER_STATUS_COMPLETED])
        raise InvalidActionError(request.action)

    async def verify_payment(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> VerifyPaymentResponse:
        """
        Mark the user as a paying, verified member and the order as paid.

        The user's access_tier becomes the order's package_id, read by a
        subquery inside the same UPDATE. Users created by the order form have no password yet; they get the
        configured default member password. Users who registered keep theirs.
        """
        default_hash = hash_password(settings.default_member_password)
        ordered_package = (
            select(Order.package_id).where(Order.id == order_id).scalar_subquery()
        )
        try:
            user_result = await db.execute(
                update(User)
                .where(User.id == user_id)
                .values(
                    has_paid=True,
                    is_verified=True,
                    status=USER_STATUS_ACTIVE,
                    password_hash=func.coalesce(User.password_hash, default_hash),
                    # Unknown order id keeps the current tier
                    access_tier=func.coalesce(ordered_package, User.access_tier),
                )
                .execution_options(synchronize_session=False)
            )
            order_result = await db.execute(
                update(Order)
                .where(Order.id == order_id)
                .values(status=ORDER_STATUS_PAID)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("verify_payment failed for order %s: %s", order_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not verify the payment. Please try again.",
                context={"order_id": str(order_id)},
            )

        if user_result.rowcount == 0:
            logger.warning("verify_payment: no user with id %s", user_id)
        if order_result.rowcount == 0:
            logger.warning("verify_payment: no order with id %s", order_id)
        logger.info("Payment verified: user=%s order=%s", user_id, order_id)
        return VerifyPaymentResponse()

    async def list_orders(self, db: AsyncSession, statuses: list) -> AdminOrdersResponse:
        """Orders in any of `statuses`, newest first, each joined with its user."""
        try:
            result = await db.execute(
                select(Order)
                .where(Order.status.in_(statuses))
                .order_by(Order.created_at.desc())
            )
            orders = list(result.scalars().all())
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Listing %s orders failed: %s", statuses, str(e), exc_info=True)
            raise DatabaseError(message="Could not load orders. Please try again.")

        return AdminOrdersResponse(orders=[AdminOrderItem.model_validate(o) for o in orders])

    async def deliver_template(
        self,
        db: AsyncSession,
        order_id: uuid.UUID,
        filename: Optional[str] = None,
        content: Optional[bytes] = None,
        content_length: Optional[int] = None,
        url: Optional[str] = None,
    ) -> TemplateDeliveryResponse:
        """
        Attach the finished template to an order and mark it completed.

        An uploaded file wins over a URL when both are sent. The file lands
        at templates/{user_id}/{order_id}/{filename}; its public URL becomes
        the order's template_path.

        Raises:
            NotFoundError:   no such order
            ValidationError: neither file nor URL, bad URL, or a rejected file
        """
        has_file = bool(filename) and content is not None
        url = (url or "").strip()
        if not has_file and not url:
            raise ValidationError(
                message="Choose a template file or enter a template URL",
                field="file",
            )

        try:
            order = await db.get(Order, order_id)
        except SQLAlchemyError as e:
            logger.error("Loading order %s failed: %s", order_id, str(e))
            raise DatabaseError(message="Could not load the order. Please try again.")
        if order is None:
            raise NotFoundError(resource="order", resource_id=str(order_id))

        stored_path: Optional[str] = None
        if has_file:
            stored_path, relative_path = await file_service.store_template(
                user_id=order.user_id,
                order_id=order.id,
                filename=filename,
                content=content,
                content_length=content_length,
            )
            template_path = file_service.public_url(relative_path)
        else:
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValidationError(
                    message="Template URL must be an http(s) link",
                    field="url",
                )
            template_path = url

        order.template_path = template_path
        order.status = ORDER_STATUS_COMPLETED
        try:
            await db.flush()
        except SQLAlchemyError as e:
            if stored_path:
                await file_service.cleanup_file(stored_path)
            logger.error("Saving delivery for order %s failed: %s", order_id, str(e), exc_info=True)
            raise DatabaseError(message="Could not save the template delivery. Please try again.")

        logger.info("Template delivered for order %s: %s", order.id, template_path)
        return TemplateDeliveryResponse(order=OrderResponse.model_validate(order))


admin_service = AdminService()
