"""Order Queries — customer-scoped reads and draft-only edits.

Invariants:
    - Every lookup is scoped by customer_id; another customer's order is "not found"
    - update/delete/add-item only while the order is a draft
    - delete cascades to items, item data, and status history
    - Listing is newest first; search is a case-insensitive substring match on
      order number and notes
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.domain_types import OrderId, OrderItemStatus, OrderStatus
from orderdesk.core.errors import ErrorContext, OrderNotEditableError, OrderNotFoundError
from orderdesk.core.subject_fields import normalize_subject
from orderdesk.db.unit_of_work import unit_of_work
from orderdesk.models.order import Order
from orderdesk.models.order_item import OrderItem

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50

PENDING_STATUSES = (
    OrderStatus.SUBMITTED, OrderStatus.PROCESSING, OrderStatus.MORE_INFO_NEEDED,
)


@dataclass
class OrderPage:
    orders: list[Order]
    total: int


class OrderQueries:
    """Read side and draft editing for a customer's orders."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_order_by_id(self, order_id: OrderId, customer_id: str) -> Order | None:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .where(Order.customer_id == customer_id)
        )
        return result.scalar_one_or_none()

    async def _get_draft(self, order_id: OrderId, customer_id: str, action: str) -> Order:
        order = await self.get_order_by_id(order_id, customer_id)
        if order is None:
            raise OrderNotFoundError(str(order_id), ErrorContext(customer_id=customer_id))
        if order.status_code != OrderStatus.DRAFT.value:
            raise OrderNotEditableError(str(order.id), order.status_code, action)
        return order

    async def get_customer_orders(
        self,
        customer_id: str,
        status: str | None = None,
        search: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> OrderPage:
        filters = [Order.customer_id == customer_id]
        if status:
            filters.append(Order.status_code == status)
        if search:
            pattern = f"%{search}%"
            filters.append(or_(
                Order.order_number.ilike(pattern), Order.notes.ilike(pattern),
            ))

        result = await self.db.execute(
            select(Order).where(*filters)
            .order_by(Order.created_at.desc())
            .limit(limit).offset(offset)
        )
        total = await self.db.scalar(
            select(func.count()).select_from(Order).where(*filters),
        )
        return OrderPage(orders=list(result.scalars().all()), total=total or 0)

    async def update_order(
        self,
        order_id: OrderId,
        customer_id: str,
        subject: dict | None = None,
        notes: str | None = None,
    ) -> Order:
        order = await self._get_draft(order_id, customer_id, "edited")
        async with unit_of_work(self.db):
            if subject is not None:
                order.subject = normalize_subject(subject, None)
            if notes is not None:
                order.notes = notes
            await self.db.flush()
        return order

    async def delete_order(self, order_id: OrderId, customer_id: str) -> None:
        order = await self._get_draft(order_id, customer_id, "deleted")
        async with unit_of_work(self.db):
            await self.db.delete(order)
        logger.info("Draft order deleted", extra={"order_id": str(order_id)})

    async def add_order_item(
        self,
        order_id: OrderId,
        customer_id: str,
        service_id: UUID,
        location_id: UUID,
    ) -> OrderItem:
        order = await self._get_draft(order_id, customer_id, "edited")
        async with unit_of_work(self.db):
            item = OrderItem(
                service_id=service_id,
                location_id=location_id,
                status=OrderItemStatus.PENDING.value,
                data=[],
            )
            order.items.append(item)
            await self.db.flush()
        return item

    async def get_customer_order_stats(self, customer_id: str) -> dict[str, int]:
        result = await self.db.execute(
            select(Order.status_code, func.count())
            .where(Order.customer_id == customer_id)
            .group_by(Order.status_code)
        )
        counts = dict(result.all())
        stats = {status.value: counts.get(status.value, 0) for status in OrderStatus}
        stats["total"] = sum(counts.values())
        stats["pending"] = sum(stats[s.value] for s in PENDING_STATUSES)
        return stats
