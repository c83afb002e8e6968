"""
B.I Booster Backend — Order Service
=====================================

What:  The storefront order form and the member's "my templates" list.
How:   One user lookup, at most one user insert/update and one order insert.
       Package name and price are copied from the catalog so the order keeps
       the price the buyer saw.
Who:   Order routes.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bibooster.exceptions import BoosterError, DatabaseError, ValidationError
from bibooster.models.order import ORDER_STATUS_PENDING, Order
from bibooster.models.user import USER_STATUS_PENDING, User
from bibooster.schemas.order import (
    OrderCreateRequest,
    OrderCreatedResponse,
    OrderListResponse,
    OrderResponse,
)
from bibooster.services.account_service import account_service
from bibooster.services.catalog_service import catalog_service

logger = logging.getLogger(__name__)


class OrderService:

    async def create_order(self, db: AsyncSession, data: OrderCreateRequest) -> OrderCreatedResponse:
        """
        Record a package order from the storefront form.

        Steps:
            1. Resolve the package from the catalog (unknown → 400)
            2. Find the buyer by email, or insert a pending user without a
               password and with access_tier set to the ordered package
            3. Insert the order with status 'pending'

        An existing buyer's tier is left alone here: the form is public, so
        the ordered package only applies once the admin verifies the payment
        (AdminService.verify_payment copies it from the order).
        """
        package = catalog_service.find_package(data.package_id)
        if package is None:
            raise ValidationError(
                message=f"Unknown package '{data.package_id}'",
                field="package_id",
                context={"allowed": catalog_service.package_ids()},
            )

        try:
            user = await account_service.find_by_email(db, data.email)
            if user is None:
                user = User(
                    name=data.name,
                    email=data.email.lower(),
                    phone=data.phone,
                    password_hash=None,
                    status=USER_STATUS_PENDING,
                    access_tier=package.id,
                    is_verified=False,
                    has_paid=False,
                )
                db.add(user)
                await db.flush()
                logger.info("Created pending user %s from order form", user.id)
            elif not user.phone:
                user.phone = data.phone

            order = Order(
                user_id=user.id,
                package_id=package.id,
                package_name=package.name,
                price=package.price,
                template_name=data.template_name,
                notes=data.notes or None,
                status=ORDER_STATUS_PENDING,
            )
            db.add(order)
            await db.flush()
        except BoosterError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error creating order: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not place the order. Please try again.",
                context={"package_id": package.id},
            )

        logger.info(
            "Order %s placed: package=%s template='%s' user=%s",
            order.id,
            package.id,
            data.template_name,
            user.id,
        )
        return OrderCreatedResponse(order=OrderResponse.model_validate(order))

    async def list_member_orders(self, db: AsyncSession, user: User) -> OrderListResponse:
        """The member's orders, newest first, with delivered template links."""
        try:
            result = await db.execute(
                select(Order)
                .where(Order.user_id == user.id)
                .order_by(Order.created_at.desc())
            )
            orders: List[Order] = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing orders for %s: %s", user.id, str(e))
            raise DatabaseError(message="Could not load your orders. Please try again.")

        return OrderListResponse(orders=[OrderResponse.model_validate(o) for o in orders])


order_service = OrderService()
