"""OrderItem ORM — one (service, location) line of an order.

Invariants:
    - Always belongs to an Order (order_id FK, cascade-deleted with it)
    - New items start as pending
    - Owns its OrderData rows
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from orderdesk.core.domain_types import OrderItemStatus
from orderdesk.db.base import Base


class OrderItem(Base):
    """Order line — a service searched in one location."""
    __tablename__ = "order_items"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    service_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("services.id"), nullable=False,
    )
    location_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id"), nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OrderItemStatus.PENDING.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    order: Mapped["Order"] = relationship("Order", back_populates="items")
    data: Mapped[list["OrderData"]] = relationship(
        "OrderData", back_populates="order_item",
        cascade="all, delete-orphan", lazy="selectin",
    )
    service: Mapped["Service"] = relationship("Service", lazy="selectin")
    location: Mapped["Location"] = relationship("Location", lazy="selectin")
