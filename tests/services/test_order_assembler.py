"""Order Assembler — complete order creation with validation-driven downgrade.

Invariants:
    - Missing requirements downgrade a requested submission to draft (no error)
    - Explicit "draft" skips validation entirely
    - Subject labels are resolved and merged under canonical keys
    - Only non-empty search values become OrderData rows
    - Order, items, and item data are written together
"""

from datetime import datetime, timezone

from sqlalchemy import func, select

from orderdesk.core.order_number import customer_code, is_canonical
from orderdesk.core.requirement_check import ServiceItem
from orderdesk.models.order import Order
from orderdesk.models.order_data import OrderData
from orderdesk.models.order_item import OrderItem
from orderdesk.services.order_assembler import CompleteOrderRequest, OrderAssembler

from tests.services.seed import CUSTOMER_ID, USER_ID

NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


def _request(catalog, **overrides) -> CompleteOrderRequest:
    values = {
        "customer_id": CUSTOMER_ID,
        "user_id": USER_ID,
        "service_items": [
            ServiceItem(catalog.criminal.id, catalog.california.id, "item-1"),
        ],
    }
    values.update(overrides)
    return CompleteOrderRequest(**values)


async def test_valid_order_is_submitted(test_db, catalog, add_requirement):
    await add_requirement("SSN", catalog.criminal, catalog.california)

    created = await OrderAssembler(test_db).create_complete_order(
        _request(catalog, subject_field_values={"SSN": "123-45-6789"}), now=NOW,
    )

    assert created.order.status_code == "submitted"
    assert created.order.submitted_at is not None
    assert not created.downgraded
    assert created.order.order_number == f"20261019-{customer_code(CUSTOMER_ID)}-0001"


async def test_missing_requirement_downgrades_to_draft(test_db, catalog, add_requirement):
    await add_requirement("SSN", catalog.criminal, catalog.california)

    created = await OrderAssembler(test_db).create_complete_order(
        _request(catalog, status="submitted"), now=NOW,
    )

    assert created.order.status_code == "draft"
    assert created.order.submitted_at is None
    assert created.downgraded
    assert created.validation_result.missing_requirements.subject_fields == [
        {"field_name": "SSN", "service_location": "Criminal Check - California"},
    ]
    stored = await test_db.scalar(
        select(Order.status_code).where(Order.id == created.order.id),
    )
    assert stored == "draft"


async def test_explicit_draft_skips_validation(test_db, catalog, add_requirement):
    await add_requirement("SSN", catalog.criminal, catalog.california)

    created = await OrderAssembler(test_db).create_complete_order(
        _request(catalog, status="draft"),
    )

    assert created.order.status_code == "draft"
    assert created.validation_result is None
    assert not created.downgraded


async def test_subject_labels_are_merged_under_canonical_keys(test_db, catalog):
    created = await OrderAssembler(test_db).create_complete_order(_request(
        catalog,
        subject={"firstName": "Old", "email": "jane@example.com"},
        subject_field_values={
            "First Name": "  Jane ", "Surname/Last Name": "Doe", "Middle Name": "",
        },
    ))

    assert created.order.subject == {
        "firstName": "Jane", "lastName": "Doe", "email": "jane@example.com",
    }


async def test_subject_location_ids_are_resolved(test_db, catalog):
    created = await OrderAssembler(test_db).create_complete_order(_request(
        catalog, subject_field_values={"State": str(catalog.texas.id)},
    ))

    assert created.order.subject == {"State": "Texas (TX)"}


async def test_search_values_become_order_data_rows(test_db, catalog):
    created = await OrderAssembler(test_db).create_complete_order(_request(
        catalog,
        search_field_values={
            "item-1": {
                "Alias": "Bobby",
                "Empty": "",
                "Years": 7,
                "County": str(catalog.los_angeles.id),
            },
            "unknown-item": {"Alias": "ignored"},
        },
    ))

    result = await test_db.execute(
        select(OrderData.field_name, OrderData.field_value, OrderData.field_type)
        .join(OrderItem, OrderData.order_item_id == OrderItem.id)
        .where(OrderItem.order_id == created.order.id)
    )
    rows = {name: (value, kind) for name, value, kind in result.all()}
    assert rows == {
        "Alias": ("Bobby", "search"),
        "Years": ("7", "search"),
        "County": ("Los Angeles", "search"),
    }


async def test_one_item_per_service_item(test_db, catalog):
    created = await OrderAssembler(test_db).create_complete_order(_request(
        catalog,
        service_items=[
            ServiceItem(catalog.criminal.id, catalog.california.id, "a"),
            ServiceItem(catalog.education.id, catalog.texas.id, "b"),
        ],
    ))

    count = await test_db.scalar(
        select(func.count()).select_from(OrderItem)
        .where(OrderItem.order_id == created.order.id),
    )
    assert count == 2
    assert {item.status for item in created.order.items} == {"pending"}


async def test_second_order_same_day_gets_next_number(test_db, catalog):
    assembler = OrderAssembler(test_db)
    first = await assembler.create_complete_order(_request(catalog), now=NOW)
    second = await assembler.create_complete_order(
        _request(catalog), now=NOW.replace(hour=10),
    )

    assert first.order.order_number.endswith("-0001")
    assert second.order.order_number.endswith("-0002")
    assert is_canonical(second.order.order_number)


async def test_create_order_makes_bare_draft(test_db):
    order = await OrderAssembler(test_db).create_order(
        CUSTOMER_ID, USER_ID, subject={"DOB": "1990-01-01"}, notes="rush",
    )

    assert order.status_code == "draft"
    assert order.items == []
    assert order.notes == "rush"
    assert order.subject == {"DOB": "1990-01-01"}
