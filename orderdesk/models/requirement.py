"""Requirement ORM — a collectible item (field, document, or form).

Invariants:
    - type ∈ {field, document, form}
    - field_data.collectionTab ∈ {subject, search} (default subject)
    - document_data.scope ∈ {per_case, per_item} (default per_case)
    - disabled requirements are never enforced

Design Decisions:
    - JSON for field_data/document_data: authored by the requirement editor,
      shape evolves without migrations
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from orderdesk.db.base import Base


class Requirement(Base):
    __tablename__ = "requirements"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    field_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    document_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    disabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
