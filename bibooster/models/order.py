"""
B.I Booster Backend — Order SQLAlchemy Model
==============================================

What:  ORM model for the `orders` table: one package purchased for one template.

Status flow (no guards, each step is a single UPDATE issued by the admin):
    pending → paid        admin verifies the payment
    paid    → completed   admin delivers the template file or URL
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bibooster.database import Base

if TYPE_CHECKING:
    from bibooster.models.user import User

ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_PAID = "paid"
ORDER_STATUS_COMPLETED = "completed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    """A package order placed through the storefront order form."""

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    package_id: Mapped[str] = mapped_column(String(50), nullable=False)

    # Display name and price copied from the catalog at order time
    package_name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[str] = mapped_column(String(100), nullable=False)

    template_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Storage URL or external link, filled in on delivery
    template_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=ORDER_STATUS_PENDING,
        server_default=text("'pending'"),
        comment="pending, paid, completed",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    user: Mapped["User"] = relationship(back_populates="orders", lazy="joined")

    # The admin queue filters by status and sorts newest first
    __table_args__ = (
        Index("idx_orders_status_created_at", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, package='{self.package_id}', "
            f"status='{self.status}')>"
        )
