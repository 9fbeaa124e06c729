"""Order Routes — order intake, draft editing, submission, and status changes.

Invariants:
    - Every route is scoped to the caller's customer (api/dependencies.py)
    - Missing orders surface as OrderNotFoundError → 404 via the global handler
    - A downgraded create is still 201; the body carries warning,
      missing_requirements, and status_override
    - Status history is returned newest first

Design Decisions:
    - Thin routes: services own transactions, routes only shape JSON
    - Plain dict responses, serialized by the helpers below
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.api.dependencies import Caller, get_caller
from orderdesk.core.errors import ErrorContext, OrderNotFoundError
from orderdesk.infrastructure.database import get_db
from orderdesk.models.order import Order
from orderdesk.models.order_item import OrderItem
from orderdesk.schemas.order import (
    DraftCreate, OrderCreate, OrderItemCreate, OrderUpdate, RequirementValues, StatusChange,
)
from orderdesk.services.order_assembler import CompleteOrderRequest, OrderAssembler
from orderdesk.services.order_lifecycle import OrderLifecycle, TransitionResult
from orderdesk.services.order_queries import DEFAULT_PAGE_SIZE, OrderQueries
from orderdesk.services.order_validation import OrderValidationService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orders", tags=["orders"])

DOWNGRADE_WARNING = (
    "Order saved as draft due to missing requirements. "
    "Please complete all required fields before submitting."
)


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def _order_summary(order: Order) -> dict:
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "status": order.status_code,
        "item_count": len(order.items),
        "notes": order.notes,
        "created_at": _iso(order.created_at),
        "submitted_at": _iso(order.submitted_at),
        "completed_at": _iso(order.completed_at),
    }


def _order_item(item: OrderItem) -> dict:
    return {
        "id": str(item.id),
        "service_id": str(item.service_id),
        "location_id": str(item.location_id),
        "status": item.status,
        "data": [
            {
                "field_name": row.field_name,
                "field_value": row.field_value,
                "field_type": row.field_type,
            }
            for row in item.data
        ],
    }


def _order_detail(order: Order) -> dict:
    return {
        **_order_summary(order),
        "customer_id": order.customer_id,
        "user_id": order.user_id,
        "subject": order.subject,
        "items": [_order_item(item) for item in order.items],
        "status_history": [
            {
                "from_status": entry.from_status,
                "to_status": entry.to_status,
                "changed_by": entry.changed_by,
                "reason": entry.reason,
                "created_at": _iso(entry.created_at),
            }
            for entry in reversed(order.status_history)
        ],
    }


def _transition_response(transition: TransitionResult) -> dict:
    return {
        "order": _order_summary(transition.order),
        "transitions": [
            {"from_status": h.from_status, "to_status": h.to_status, "reason": h.reason}
            for h in transition.history
        ],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Create an order with items; falls back to draft when requirements are missing."""
    created = await OrderAssembler(db).create_complete_order(CompleteOrderRequest(
        customer_id=caller.customer_id,
        user_id=caller.user_id,
        service_items=body.domain_items(),
        subject=body.subject,
        subject_field_values=body.subject_field_values,
        search_field_values=body.search_field_values,
        uploaded_documents=body.uploaded_documents,
        notes=body.notes,
        status=body.status,
    ))
    response = _order_detail(created.order)
    if created.downgraded:
        response["warning"] = DOWNGRADE_WARNING
        response["missing_requirements"] = (
            created.validation_result.missing_requirements.to_dict()
        )
        response["status_override"] = True
    return response


@router.post("/draft", status_code=status.HTTP_201_CREATED)
async def create_draft(
    body: DraftCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Start an empty draft; items are attached one at a time."""
    order = await OrderAssembler(db).create_order(
        caller.customer_id, caller.user_id, subject=body.subject, notes=body.notes,
    )
    return _order_detail(order)


@router.get("")
async def list_orders(
    status_filter: str | None = Query(None, alias="status"),
    search: str | None = Query(None, max_length=100),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=200),
    offset: int = Query(0, ge=0),
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's orders, newest first."""
    page = await OrderQueries(db).get_customer_orders(
        caller.customer_id, status=status_filter, search=search,
        limit=limit, offset=offset,
    )
    return {
        "orders": [_order_summary(o) for o in page.orders],
        "pagination": {"limit": limit, "offset": offset, "total": page.total},
    }


@router.get("/stats")
async def order_stats(
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    return await OrderQueries(db).get_customer_order_stats(caller.customer_id)


@router.post("/requirements/validate")
async def validate_requirements(
    body: RequirementValues,
    db: AsyncSession = Depends(get_db),
):
    """Dry-run the requirement check for the wizard's review step."""
    result = await OrderValidationService(db).validate_order_requirements(
        body.domain_items(),
        subject_field_values=body.subject_field_values,
        search_field_values=body.search_field_values,
        uploaded_documents=body.uploaded_documents,
    )
    return result.to_dict()


@router.get("/{order_id}")
async def get_order(
    order_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    order = await OrderQueries(db).get_order_by_id(order_id, caller.customer_id)
    if order is None:
        raise OrderNotFoundError(
            str(order_id), ErrorContext(customer_id=caller.customer_id),
        )
    return _order_detail(order)


@router.put("/{order_id}")
async def update_order(
    order_id: UUID,
    body: OrderUpdate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Edit subject/notes of a draft."""
    order = await OrderQueries(db).update_order(
        order_id, caller.customer_id, subject=body.subject, notes=body.notes,
    )
    return _order_detail(order)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    await OrderQueries(db).delete_order(order_id, caller.customer_id)


@router.post("/{order_id}/items", status_code=status.HTTP_201_CREATED)
async def add_order_item(
    order_id: UUID,
    body: OrderItemCreate,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    item = await OrderQueries(db).add_order_item(
        order_id, caller.customer_id, body.service_id, body.location_id,
    )
    return _order_item(item)


@router.post("/{order_id}/submit")
async def submit_order(
    order_id: UUID,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """Re-validate a stored draft and submit it."""
    transition = await OrderLifecycle(db).submit_order(
        order_id, caller.customer_id, caller.user_id,
    )
    return _transition_response(transition)


@router.post("/{order_id}/status")
async def change_status(
    order_id: UUID,
    body: StatusChange,
    caller: Caller = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    transition = await OrderLifecycle(db).update_order_status(
        order_id, caller.customer_id, caller.user_id, body.status, body.reason,
    )
    return _transition_response(transition)
