"""Order Assembler — creates a complete order (order + items + item data) in one go.

Invariants:
    - Order number allocated before the write transaction opens
    - Subject values are resolved and normalized before storage
    - Requested submission (explicit "submitted" or no status) runs validation first;
      a failed validation downgrades the order to draft and is returned, not raised
    - Order, items, and item data are written in one unit of work: all or nothing
    - One OrderData row per non-empty resolved search value, tagged "search";
      non-string values stored JSON-encoded
    - Uploaded documents are validated against but not persisted here

Design Decisions:
    - Request as a dataclass: the HTTP schema maps onto it, tests build it directly
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.domain_types import OrderDataType, OrderItemStatus, OrderStatus
from orderdesk.core.requirement_check import ServiceItem, ValidationResult
from orderdesk.core.subject_fields import normalize_subject
from orderdesk.db.unit_of_work import unit_of_work
from orderdesk.models.order import Order
from orderdesk.models.order_data import OrderData
from orderdesk.models.order_item import OrderItem
from orderdesk.services.field_resolver import FieldValueResolver
from orderdesk.services.order_number import OrderNumberAllocator
from orderdesk.services.order_validation import OrderValidationService

logger = logging.getLogger(__name__)


@dataclass
class CompleteOrderRequest:
    customer_id: str
    user_id: str
    service_items: list[ServiceItem]
    subject: dict = field(default_factory=dict)
    subject_field_values: dict | None = None
    search_field_values: dict | None = None
    uploaded_documents: dict | None = None
    notes: str | None = None
    status: str | None = None


@dataclass
class CreatedOrder:
    order: Order
    validation_result: ValidationResult | None = None

    @property
    def downgraded(self) -> bool:
        return self.validation_result is not None and not self.validation_result.is_valid


def _stored_value(value) -> str:
    return value if isinstance(value, str) else json.dumps(value)


class OrderAssembler:
    """Orchestrates numbering, resolution, validation, and the transactional insert."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.resolver = FieldValueResolver(db)

    async def create_order(
        self,
        customer_id: str,
        user_id: str,
        subject: dict | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> Order:
        """Bare draft order: no items, no validation."""
        order_number = await OrderNumberAllocator(self.db).generate_order_number(
            customer_id, now,
        )
        async with unit_of_work(self.db):
            order = Order(
                order_number=order_number,
                customer_id=customer_id,
                user_id=user_id,
                status_code=OrderStatus.DRAFT.value,
                subject=normalize_subject(subject, None),
                notes=notes,
                items=[],
                status_history=[],
                created_at=now or datetime.now(timezone.utc),
            )
            self.db.add(order)
            await self.db.flush()
        return order

    async def _final_status(
        self, request: CompleteOrderRequest,
    ) -> tuple[OrderStatus, ValidationResult | None]:
        if request.status not in (None, OrderStatus.SUBMITTED.value):
            return OrderStatus.DRAFT, None

        validation = await OrderValidationService(self.db).validate_order_requirements(
            request.service_items,
            subject_field_values=request.subject_field_values,
            search_field_values=request.search_field_values,
            uploaded_documents=request.uploaded_documents,
        )
        if validation.is_valid:
            return OrderStatus.SUBMITTED, validation

        logger.warning(
            "Order validation failed, saving as draft",
            extra={"customer_id": request.customer_id},
        )
        return OrderStatus.DRAFT, validation

    async def _build_item(
        self, order: Order, service_item: ServiceItem, search_values: dict | None,
    ) -> OrderItem:
        order_item = OrderItem(
            service_id=service_item.service_id,
            location_id=service_item.location_id,
            status=OrderItemStatus.PENDING.value,
            data=[],
        )
        order.items.append(order_item)

        if search_values:
            resolved = await self.resolver.resolve_field_values(search_values)
            for field_name, value in resolved.items():
                if value is None or value == "":
                    continue
                order_item.data.append(OrderData(
                    field_name=field_name,
                    field_value=_stored_value(value),
                    field_type=OrderDataType.SEARCH.value,
                ))
        return order_item

    async def create_complete_order(
        self, request: CompleteOrderRequest, now: datetime | None = None,
    ) -> CreatedOrder:
        order_number = await OrderNumberAllocator(self.db).generate_order_number(
            request.customer_id, now,
        )
        resolved_subject = await self.resolver.resolve_field_values(
            request.subject_field_values,
        )
        subject = normalize_subject(request.subject, resolved_subject)
        final_status, validation = await self._final_status(request)

        search_field_values = request.search_field_values or {}
        created_at = now or datetime.now(timezone.utc)
        async with unit_of_work(self.db):
            order = Order(
                order_number=order_number,
                customer_id=request.customer_id,
                user_id=request.user_id,
                status_code=final_status.value,
                subject=subject,
                notes=request.notes,
                items=[],
                status_history=[],
                created_at=created_at,
                submitted_at=(
                    created_at if final_status == OrderStatus.SUBMITTED else None
                ),
            )
            self.db.add(order)
            for service_item in request.service_items:
                await self._build_item(
                    order, service_item, search_field_values.get(service_item.item_id),
                )
            await self.db.flush()

        logger.info(
            f"Order {order_number} created as {final_status.value}",
            extra={"order_id": str(order.id), "customer_id": request.customer_id},
        )
        return CreatedOrder(order=order, validation_result=validation)
