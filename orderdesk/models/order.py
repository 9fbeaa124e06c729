"""Order ORM — persists the aggregate root of a background-check order.

Invariants:
    - id is UUID primary key
    - order_number is unique (storage-level guard for the sequence race)
    - status_code ∈ OrderStatus values (CHECK constraint)
    - status_code changes only through the lifecycle service
    - subject/notes editable only while draft; delete only while draft
    - cascade delete for items (and their data) and status history

Design Decisions:
    - JSON column for subject: normalized key/value map, shape varies per customer
    - customer_id/user_id are opaque strings: identities live in the auth subsystem
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, JSON, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from orderdesk.core.domain_types import OrderStatus
from orderdesk.db.base import Base

_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in OrderStatus)


class Order(Base):
    """Order aggregate root — owns items, item data, and status history."""
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            f"status_code IN ({_STATUS_VALUES})", name="ck_orders_status_code",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    order_number: Mapped[str] = mapped_column(
        String(40), nullable=False, unique=True,
    )
    customer_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status_code: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OrderStatus.DRAFT.value,
    )
    subject: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    items: Mapped[list["OrderItem"]] = relationship(
        "OrderItem", back_populates="order",
        cascade="all, delete-orphan", lazy="selectin",
    )
    status_history: Mapped[list["OrderStatusHistory"]] = relationship(
        "OrderStatusHistory", back_populates="order",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="OrderStatusHistory.created_at",
    )
