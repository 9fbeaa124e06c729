"""Domain Types — verifies identity wrappers and enum values.

Tests:
    - NewType wrappers exist and are callable
    - Enums serialize to the strings stored in the database
    - OrderStatus has exactly 6 members (the lifecycle table is keyed on them)
"""

from uuid import uuid4

from orderdesk.core.domain_types import (
    OrderId, OrderStatus, RequirementType, CollectionTab, DocumentScope,
)


def test_order_id_wraps_uuid():
    uid = uuid4()
    assert OrderId(uid) == uid


def test_order_status_has_six_states():
    assert {s.value for s in OrderStatus} == {
        "draft", "submitted", "processing", "more_info_needed", "completed", "cancelled",
    }


def test_enums_compare_equal_to_stored_strings():
    assert OrderStatus.MORE_INFO_NEEDED == "more_info_needed"
    assert RequirementType.DOCUMENT == "document"
    assert CollectionTab.SEARCH == "search"
    assert DocumentScope.PER_ITEM == "per_item"
