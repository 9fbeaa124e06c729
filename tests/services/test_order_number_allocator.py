"""Order Number Allocator — sequence per customer per day, collision fallback.

Invariants:
    - First order of the day is 0001, the next one 0002 with the same code
    - Sequence restarts on a new calendar day
    - Exhausted retries yield a fallback number instead of an error
"""

import re
from datetime import datetime, timedelta, timezone

from orderdesk.core.order_number import customer_code, format_order_number, is_canonical
from orderdesk.services.order_number import OrderNumberAllocator

from tests.services.seed import CUSTOMER_ID, OTHER_CUSTOMER_ID

NOW = datetime(2026, 10, 19, 14, 0, tzinfo=timezone.utc)


async def test_first_order_of_day_gets_sequence_one(test_db):
    number = await OrderNumberAllocator(test_db).generate_order_number(CUSTOMER_ID, NOW)
    assert number == f"20261019-{customer_code(CUSTOMER_ID)}-0001"
    assert is_canonical(number)


async def test_next_order_same_day_increments(test_db, add_order):
    code = customer_code(CUSTOMER_ID)
    await add_order(
        order_number=format_order_number(NOW.date(), code, 1),
        created_at=NOW - timedelta(hours=1),
    )

    number = await OrderNumberAllocator(test_db).generate_order_number(CUSTOMER_ID, NOW)

    assert number == f"20261019-{code}-0002"


async def test_sequence_resets_on_new_day(test_db, add_order):
    code = customer_code(CUSTOMER_ID)
    await add_order(
        order_number=format_order_number(NOW.date(), code, 7), created_at=NOW,
    )
    tomorrow = NOW + timedelta(days=1)

    number = await OrderNumberAllocator(test_db).generate_order_number(
        CUSTOMER_ID, tomorrow,
    )

    assert number == f"20261020-{code}-0001"


async def test_other_customers_orders_do_not_advance_sequence(test_db, add_order):
    await add_order(
        customer_id=OTHER_CUSTOMER_ID,
        order_number=format_order_number(NOW.date(), customer_code(OTHER_CUSTOMER_ID), 3),
        created_at=NOW,
    )

    number = await OrderNumberAllocator(test_db).generate_order_number(CUSTOMER_ID, NOW)

    assert number.endswith("-0001")


async def test_exhausted_retries_fall_back_to_timestamp_suffix(test_db, monkeypatch):
    allocator = OrderNumberAllocator(test_db, max_retries=3, max_delay_ms=0)
    checks = []

    async def always_taken(order_number):
        checks.append(order_number)
        return True

    monkeypatch.setattr(allocator, "_number_taken", always_taken)

    number = await allocator.generate_order_number(CUSTOMER_ID, NOW)

    assert len(checks) == 3
    assert re.match(rf"^20261019-{customer_code(CUSTOMER_ID)}-0001-\d{{6}}$", number)
    assert not is_canonical(number)


async def test_collision_then_free_number_is_returned(test_db, monkeypatch):
    allocator = OrderNumberAllocator(test_db, max_retries=5, max_delay_ms=0)
    answers = iter([True, False])

    async def taken_once(order_number):
        return next(answers)

    monkeypatch.setattr(allocator, "_number_taken", taken_once)

    number = await allocator.generate_order_number(CUSTOMER_ID, NOW)

    assert is_canonical(number)
