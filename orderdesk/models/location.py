"""Location ORM — country / state / county hierarchy used for items and addresses.

Invariants:
    - Countries have no parent; states and counties point at their parent row
    - subregion1 names a state/province level, subregion2 a county level
    - Read-only for this core
"""

import uuid

from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from orderdesk.db.base import Base


class Location(Base):
    """One node of the location hierarchy."""
    __tablename__ = "locations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code2: Mapped[str | None] = mapped_column(String(10), nullable=True)
    subregion1: Mapped[str | None] = mapped_column(String(200), nullable=True)
    subregion2: Mapped[str | None] = mapped_column(String(200), nullable=True)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("locations.id"), nullable=True,
    )

    @property
    def most_specific_name(self) -> str:
        return self.subregion2 or self.subregion1 or self.name
