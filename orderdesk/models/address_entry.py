"""AddressEntry ORM — canonical, exact-match-deduplicated address.

Invariants:
    - Never mutated after creation: reused or superseded by a new row
    - Falsy components stored as NULL so exact-match lookups compare NULLs
    - No case or whitespace folding: "Main St" and "main st" are distinct rows
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from orderdesk.db.base import Base


class AddressEntry(Base):
    __tablename__ = "address_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    street1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    street2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    state_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id"), nullable=True,
    )
    county_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id"), nullable=True,
    )
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    state: Mapped["Location"] = relationship(
        "Location", foreign_keys=[state_id], lazy="selectin",
    )
    county: Mapped["Location"] = relationship(
        "Location", foreign_keys=[county_id], lazy="selectin",
    )
    country: Mapped["Location"] = relationship(
        "Location", foreign_keys=[country_id], lazy="selectin",
    )
