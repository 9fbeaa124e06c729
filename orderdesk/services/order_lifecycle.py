"""Order Lifecycle — applies status transitions with an audit trail.

Invariants:
    - Orders are always loaded scoped by (id, customer_id); mismatch → OrderNotFoundError
    - Illegal (from, to) pairs → InvalidTransitionError carrying both statuses
    - Each planned step writes one order update and one OrderStatusHistory row
    - All steps of one request share a single unit of work: compound
      more_info_needed → processing commits both steps or neither
    - submitted_at stamped on entering submitted, completed_at on entering completed

Design Decisions:
    - Step planning is pure (core/status_transitions.py); this module only applies it
    - flush() after every step so the compound case issues two separate UPDATEs
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.domain_types import OrderId, OrderStatus
from orderdesk.core.errors import (
    ErrorContext, InvalidTransitionError, OrderNotEditableError,
    OrderNotFoundError, OrderValidationFailedError,
)
from orderdesk.core.repository_protocols import DocumentReferenceResolver
from orderdesk.core.status_transitions import (
    TransitionStep, is_valid_transition, plan_transition,
)
from orderdesk.db.unit_of_work import unit_of_work
from orderdesk.models.order import Order
from orderdesk.models.order_status_history import OrderStatusHistory
from orderdesk.services.order_validation import OrderValidationService

logger = logging.getLogger(__name__)

SUBMITTED_BY_CUSTOMER_REASON = "Order submitted by customer"


@dataclass
class TransitionResult:
    order: Order
    history: list[OrderStatusHistory] = field(default_factory=list)


class OrderLifecycle:
    """Status state machine over persisted orders."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_scoped(self, order_id: OrderId, customer_id: str) -> Order:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .where(Order.customer_id == customer_id)
        )
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(
                str(order_id), ErrorContext(customer_id=customer_id),
            )
        return order

    def _apply_step(
        self, order: Order, step: TransitionStep, user_id: str,
    ) -> OrderStatusHistory:
        now = datetime.now(timezone.utc)
        order.status_code = step.to_status.value
        if step.to_status == OrderStatus.SUBMITTED:
            order.submitted_at = now
        elif step.to_status == OrderStatus.COMPLETED:
            order.completed_at = now

        entry = OrderStatusHistory(
            from_status=step.from_status.value,
            to_status=step.to_status.value,
            changed_by=user_id,
            reason=step.reason,
            created_at=now,
        )
        order.status_history.append(entry)
        return entry

    async def update_order_status(
        self,
        order_id: OrderId,
        customer_id: str,
        user_id: str,
        new_status: str,
        reason: str | None = None,
    ) -> TransitionResult:
        order = await self._get_scoped(order_id, customer_id)
        current = order.status_code

        if not is_valid_transition(current, new_status):
            raise InvalidTransitionError(
                current, new_status,
                ErrorContext(order_id=str(order.id), customer_id=customer_id),
            )
        steps = plan_transition(current, new_status, reason)

        transition = TransitionResult(order=order)
        async with unit_of_work(self.db):
            for step in steps:
                transition.history.append(self._apply_step(order, step, user_id))
                await self.db.flush()

        logger.info(
            f"Order status changed {current} -> {new_status} ({len(steps)} step(s))",
            extra={
                "order_id": str(order.id), "from_status": current,
                "to_status": new_status,
            },
        )
        return transition

    async def submit_order(
        self,
        order_id: OrderId,
        customer_id: str,
        user_id: str,
        documents: DocumentReferenceResolver | None = None,
    ) -> TransitionResult:
        """Validate a stored draft and move it to submitted."""
        order = await self._get_scoped(order_id, customer_id)
        if order.status_code != OrderStatus.DRAFT.value:
            raise OrderNotEditableError(str(order.id), order.status_code, "submitted")

        can_submit, validation = await OrderValidationService(
            self.db,
        ).can_submit_order(order.id, documents)
        if not can_submit:
            logger.warning(
                "Order cannot be submitted due to missing requirements",
                extra={"order_id": str(order.id)},
            )
            raise OrderValidationFailedError(
                validation.missing_requirements.to_dict(),
                ErrorContext(order_id=str(order.id), customer_id=customer_id),
            )

        return await self.update_order_status(
            order.id, customer_id, user_id,
            OrderStatus.SUBMITTED.value, SUBMITTED_BY_CUSTOMER_REASON,
        )
