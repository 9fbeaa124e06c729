"""LocationRequirementMapping ORM — per-(service, location) requirement override.

Invariants:
    - One row per (service, location, requirement)
    - The only source of truth for "is this requirement enforced here"
"""

import uuid

from sqlalchemy import Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from orderdesk.db.base import Base


class LocationRequirementMapping(Base):
    __tablename__ = "location_requirement_mappings"
    __table_args__ = (
        UniqueConstraint(
            "service_id", "location_id", "requirement_id",
            name="uq_location_requirement_mapping",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    service_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("services.id"), nullable=False, index=True,
    )
    location_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id"), nullable=False,
    )
    requirement_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("requirements.id"), nullable=False,
    )
    is_required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )

    requirement: Mapped["Requirement"] = relationship("Requirement", lazy="selectin")
