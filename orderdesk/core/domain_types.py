"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - OrderId wraps the order UUID at service and protocol boundaries
    - Customer and user ids stay plain strings: they are issued by the identity provider
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare equal to the stored column value
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

OrderId = NewType("OrderId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class OrderStatus(str, Enum):
    """Order lifecycle states — maps to orders.status_code."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    PROCESSING = "processing"
    MORE_INFO_NEEDED = "more_info_needed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderItemStatus(str, Enum):
    """Line-item states. Items start pending; fulfilment is out of scope."""
    PENDING = "pending"


class RequirementType(str, Enum):
    """What a requirement asks the customer to supply."""
    FIELD = "field"
    DOCUMENT = "document"
    FORM = "form"


class CollectionTab(str, Enum):
    """Where a field requirement is collected: once per order, or per item."""
    SUBJECT = "subject"
    SEARCH = "search"


class DocumentScope(str, Enum):
    """Whether one upload covers the whole order or each item needs its own."""
    PER_CASE = "per_case"
    PER_ITEM = "per_item"


class FieldDataType(str, Enum):
    """Field data types that change how presence is judged."""
    ADDRESS_BLOCK = "address_block"


class OrderDataType(str, Enum):
    """Tag stored on order_data rows."""
    SEARCH = "search"
