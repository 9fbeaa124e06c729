"""Order Validation — loads both requirement sources and runs the requirement check.

Invariants:
    - Only non-disabled service-level requirements for the order's services are loaded
    - Location rules are loaded for every (service, location) the order touches
    - Enforcement and de-duplication live in core/requirement_check.py
    - A failed validation is a result, not an exception

Design Decisions:
    - Imperative shell around a pure check: one query per source, then no more IO
    - can_submit_order rebuilds the input from persisted rows so drafts saved earlier
      can be re-validated; document references come from an external resolver
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.domain_types import OrderId, OrderStatus
from orderdesk.core.errors import OrderNotFoundError
from orderdesk.core.repository_protocols import DocumentReferenceResolver
from orderdesk.core.requirement_check import (
    LocationRequirementRule, RequirementSpec, ServiceItem,
    ServiceRequirementLink, ValidationResult, find_missing_requirements,
)
from orderdesk.models.location import Location
from orderdesk.models.location_requirement_mapping import LocationRequirementMapping
from orderdesk.models.order import Order
from orderdesk.models.requirement import Requirement
from orderdesk.models.service import Service
from orderdesk.models.service_requirement import ServiceRequirement

logger = logging.getLogger(__name__)


def requirement_spec(requirement: Requirement) -> RequirementSpec:
    return RequirementSpec(
        id=requirement.id,
        name=requirement.name,
        type=requirement.type,
        field_data=requirement.field_data,
        document_data=requirement.document_data,
        disabled=requirement.disabled,
    )


class OrderValidationService:
    """Decides whether an order carries everything its services require."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def validate_order_requirements(
        self,
        service_items: list[ServiceItem],
        subject_field_values: dict | None = None,
        search_field_values: dict | None = None,
        uploaded_documents: dict | None = None,
    ) -> ValidationResult:
        if not service_items:
            return ValidationResult.empty()

        service_ids = {item.service_id for item in service_items}
        location_ids = {item.location_id for item in service_items}

        links = await self._load_service_links(service_ids)
        rules = await self._load_location_rules(service_ids, location_ids)
        service_names = await self._names(Service, service_ids)
        location_names = await self._names(Location, location_ids)

        result = find_missing_requirements(
            service_items, links, rules,
            subject_values=subject_field_values,
            search_values=search_field_values,
            uploaded_documents=uploaded_documents,
            service_names=service_names,
            location_names=location_names,
        )

        if not result.is_valid:
            missing = result.missing_requirements
            logger.info(
                f"Order validation failed: {len(missing.subject_fields)} subject, "
                f"{len(missing.search_fields)} search, "
                f"{len(missing.documents)} document requirement(s) missing",
            )
        return result

    async def _load_service_links(
        self, service_ids: set[UUID],
    ) -> list[ServiceRequirementLink]:
        result = await self.db.execute(
            select(ServiceRequirement)
            .join(Requirement, ServiceRequirement.requirement_id == Requirement.id)
            .where(ServiceRequirement.service_id.in_(service_ids))
            .where(Requirement.disabled.is_(False))
            .order_by(ServiceRequirement.display_order)
        )
        return [
            ServiceRequirementLink(
                service_id=row.service_id,
                requirement=requirement_spec(row.requirement),
            )
            for row in result.scalars().all()
        ]

    async def _load_location_rules(
        self, service_ids: set[UUID], location_ids: set[UUID],
    ) -> list[LocationRequirementRule]:
        result = await self.db.execute(
            select(LocationRequirementMapping)
            .where(LocationRequirementMapping.service_id.in_(service_ids))
            .where(LocationRequirementMapping.location_id.in_(location_ids))
        )
        return [
            LocationRequirementRule(
                service_id=row.service_id,
                location_id=row.location_id,
                requirement=requirement_spec(row.requirement),
                is_required=row.is_required,
            )
            for row in result.scalars().all()
        ]

    async def _names(self, model, ids: set[UUID]) -> dict[UUID, str]:
        result = await self.db.execute(
            select(model.id, model.name).where(model.id.in_(ids)),
        )
        return {row.id: row.name for row in result.all()}

    async def can_submit_order(
        self,
        order_id: OrderId,
        documents: DocumentReferenceResolver | None = None,
    ) -> tuple[bool, ValidationResult]:
        """Re-validate a persisted draft before it may be submitted."""
        result = await self.db.execute(select(Order).where(Order.id == order_id))
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(str(order_id))

        if order.status_code != OrderStatus.DRAFT.value:
            return False, ValidationResult.empty(is_valid=False)

        service_items = [
            ServiceItem(
                service_id=item.service_id,
                location_id=item.location_id,
                item_id=str(item.id),
            )
            for item in order.items
        ]
        search_values = {
            str(item.id): {row.field_name: row.field_value for row in item.data}
            for item in order.items
        }
        uploaded = await documents.uploaded_documents(order.id) if documents else {}

        validation = await self.validate_order_requirements(
            service_items,
            subject_field_values=order.subject,
            search_field_values=search_values,
            uploaded_documents=uploaded,
        )
        return validation.is_valid, validation
