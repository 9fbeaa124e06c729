"""ServiceRequirement ORM — default service → requirement association.

Invariants:
    - One row per (service, requirement)
    - Carries display ordering only; enforcement comes from location mappings
"""

import uuid

from sqlalchemy import Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from orderdesk.db.base import Base


class ServiceRequirement(Base):
    __tablename__ = "service_requirements"
    __table_args__ = (
        UniqueConstraint("service_id", "requirement_id", name="uq_service_requirement"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    service_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("services.id"), nullable=False, index=True,
    )
    requirement_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("requirements.id"), nullable=False,
    )
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    requirement: Mapped["Requirement"] = relationship("Requirement", lazy="selectin")
