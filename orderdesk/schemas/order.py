"""Order Schemas — Pydantic models with field-level validation for the order API.

Invariants:
    - Service/location ids must be UUIDs; item ids are client-issued strings
    - OrderCreate.status limited to draft | submitted (omitted = try to submit)
    - Free-form value maps (subject/search/documents) are accepted as-is; their
      content is judged by the requirement check, not here
"""

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from orderdesk.core.requirement_check import ServiceItem


class ServiceItemIn(BaseModel):
    """One (service, location) line chosen in the order wizard."""
    service_id: UUID
    location_id: UUID
    item_id: str = Field(min_length=1, max_length=100)
    service_name: str | None = Field(None, max_length=200)
    location_name: str | None = Field(None, max_length=200)

    def to_domain(self) -> ServiceItem:
        return ServiceItem(
            service_id=self.service_id,
            location_id=self.location_id,
            item_id=self.item_id,
            service_name=self.service_name,
            location_name=self.location_name,
        )


class RequirementValues(BaseModel):
    """Everything the requirement check looks at."""
    service_items: list[ServiceItemIn] = Field(default_factory=list)
    subject_field_values: dict[str, Any] | None = None
    search_field_values: dict[str, dict[str, Any]] | None = None
    uploaded_documents: dict[str, Any] | None = None

    def domain_items(self) -> list[ServiceItem]:
        return [item.to_domain() for item in self.service_items]


class OrderCreate(RequirementValues):
    """Complete order as submitted by the wizard."""
    subject: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = Field(None, max_length=5000)
    status: Literal["draft", "submitted"] | None = None


class DraftCreate(BaseModel):
    """Bare draft: subject and notes only, items are added later."""
    subject: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = Field(None, max_length=5000)


class OrderItemCreate(BaseModel):
    service_id: UUID
    location_id: UUID


class OrderUpdate(BaseModel):
    """Draft edit — only subject and notes may change."""
    subject: dict[str, Any] | None = None
    notes: str | None = Field(None, max_length=5000)


class StatusChange(BaseModel):
    """Requested status transition."""
    status: str = Field(min_length=1, max_length=20)
    reason: str | None = Field(None, max_length=2000)

    @field_validator("status")
    @classmethod
    def strip_status(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("status cannot be empty or whitespace")
        return v
