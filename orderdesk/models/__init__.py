"""ORM Models — SQLAlchemy declarative models for all order-intake entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Order is the aggregate root; items, item data, and history are scoped by order_id
    - Catalog tables (services, locations, requirements, mappings) are read-only here

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from orderdesk.models.order import Order  # noqa: F401
from orderdesk.models.order_item import OrderItem  # noqa: F401
from orderdesk.models.order_data import OrderData  # noqa: F401
from orderdesk.models.order_status_history import OrderStatusHistory  # noqa: F401
from orderdesk.models.service import Service  # noqa: F401
from orderdesk.models.location import Location  # noqa: F401
from orderdesk.models.requirement import Requirement  # noqa: F401
from orderdesk.models.service_requirement import ServiceRequirement  # noqa: F401
from orderdesk.models.location_requirement_mapping import LocationRequirementMapping  # noqa: F401
from orderdesk.models.address_entry import AddressEntry  # noqa: F401
