"""Error Hierarchy — typed, categorized exceptions for all order-intake failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with OrderDeskError base: FastAPI global handler catches all
    - Failed requirement validation during order creation is NOT an error (order is
      downgraded to draft); OrderValidationFailedError only covers explicit submission
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    order_id: str | None = None
    customer_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class OrderDeskError(Exception):
    """Base exception for all order-intake errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def details(self) -> dict | None:
        """Extra machine-readable payload; subclasses override."""
        return None

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        body = {
            "code": self.code,
            "message": self.context.user_message or self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "order_id": self.context.order_id,
                "customer_id": self.context.customer_id,
            },
        }
        details = self.details()
        if details is not None:
            body["details"] = details
        return {"error": body}


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(OrderDeskError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class OrderNotFoundError(ResourceNotFoundError):
    """Order does not exist or belongs to another customer."""
    def __init__(self, order_id: str, context: ErrorContext | None = None):
        super().__init__("Order", order_id, context)


class InvalidTransitionError(OrderDeskError):
    """Requested status is not reachable from the current one."""
    def __init__(
        self,
        current_status: str,
        requested_status: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Invalid status transition from {current_status} to {requested_status}",
            "INVALID_STATUS_TRANSITION", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.current_status = current_status
        self.requested_status = requested_status

    def details(self) -> dict:
        return {
            "current_status": self.current_status,
            "requested_status": self.requested_status,
        }


class OrderNotEditableError(OrderDeskError):
    """Order exists but is no longer a draft."""
    def __init__(
        self, order_id: str, status: str, action: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Order '{order_id}' is {status}; only draft orders can be {action}",
            "ORDER_NOT_EDITABLE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.status = status
        self.action = action


class OrderValidationFailedError(OrderDeskError):
    """Draft submission attempted while required items are still missing."""
    def __init__(
        self, missing_requirements: dict, context: ErrorContext | None = None,
    ):
        super().__init__(
            "Order validation failed. Missing required fields or documents.",
            "ORDER_REQUIREMENTS_MISSING", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 422,
        )
        self.missing_requirements = missing_requirements

    def details(self) -> dict:
        return {"missing_requirements": self.missing_requirements}


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(OrderDeskError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
