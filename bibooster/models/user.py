"""
B.I Booster Backend — User SQLAlchemy Model
=============================================

What:  ORM model for the `users` table: storefront buyers and LMS members.
How:   One row per email address. Rows are created either by the
       registration form or by the package order form.

Flags that gate the member area:
    is_verified   set by the admin when payment is confirmed
    has_paid      set together with is_verified
    access_tier   package tier the member bought (none until an order)
    package_access optional override shown in the member session
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, String, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bibooster.database import Base

if TYPE_CHECKING:
    from bibooster.models.order import Order

USER_STATUS_PENDING = "pending"
USER_STATUS_ACTIVE = "active"

TIER_NONE = "none"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A storefront buyer who may become an LMS member.

    Lifecycle:
        1. Created with status='pending', is_verified/has_paid false
        2. Admin verifies the payment → status='active', both flags true
        3. Member can now log in and open the course
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Stored lowercased; lookups lowercase their input too.
    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        index=True,
    )

    phone: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    # bcrypt hash. NULL for users created by the order form until the
    # admin verifies their payment.
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=USER_STATUS_PENDING,
        server_default=text("'pending'"),
        comment="pending, active",
    )

    access_tier: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=TIER_NONE,
        server_default=text("'none'"),
        comment="none, small, medium, large, enterprise",
    )

    package_access: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    is_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    has_paid: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    orders: Mapped[List["Order"]] = relationship(back_populates="user")

    @property
    def effective_tier(self) -> str:
        """Tier the member area uses: package_access wins over access_tier."""
        return self.package_access or self.access_tier

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', status='{self.status}')>"
