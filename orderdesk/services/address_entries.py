"""Address Entries — find-or-create canonical address rows and format them for display.

Invariants:
    - Effectively-empty input (no street1, city, state, or postal code) creates nothing
    - Lookup is an exact match on (street1, street2, city, state_id, county_id,
      postal_code) with falsy components normalized to NULL; first match wins
    - Lookup/creation failures are logged and reported as None, never raised
    - A duplicate row under a concurrent race is tolerated (not retried)

Design Decisions:
    - No fuzzy or case-insensitive matching: cheap, predictable keys
    - create_or_find commits its own write: it is called outside order creation
    - Reads use populate_existing: an entry created earlier on the same session has
      its location relationships unloaded
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.address_format import (
    AddressParts, format_address, is_effectively_empty, normalize_components,
)
from orderdesk.db.unit_of_work import unit_of_work
from orderdesk.models.address_entry import AddressEntry

logger = logging.getLogger(__name__)


def _as_uuid(value) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    return UUID(str(value))


def address_entry_parts(entry: AddressEntry) -> AddressParts:
    return AddressParts(
        street1=entry.street1,
        street2=entry.street2,
        city=entry.city,
        county=entry.county.name if entry.county else None,
        state=entry.state.name if entry.state else None,
        state_code=entry.state.code2 if entry.state else None,
        postal_code=entry.postal_code,
        country=entry.country.name if entry.country else None,
    )


class AddressEntryService:
    """Deduplicated address storage."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_or_find_address_entry(
        self, address_data, user_id: str,
    ) -> UUID | None:
        if not isinstance(address_data, dict) or is_effectively_empty(address_data):
            return None

        try:
            key = normalize_components(address_data)
            key["state_id"] = _as_uuid(key["state_id"])
            key["county_id"] = _as_uuid(key["county_id"])

            existing = await self._find_exact(key)
            if existing is not None:
                logger.info(
                    "Reusing existing address entry",
                    extra={"address_id": str(existing), "user_id": user_id},
                )
                return existing

            async with unit_of_work(self.db):
                entry = AddressEntry(country_id=None, **key)
                self.db.add(entry)
                await self.db.flush()
                entry_id = entry.id

            logger.info(
                "Created new address entry",
                extra={"address_id": str(entry_id), "user_id": user_id},
            )
            return entry_id
        except (SQLAlchemyError, ValueError) as e:
            logger.warning(
                f"Failed to create or find address entry for user {user_id}: {e}",
            )
            return None

    async def _find_exact(self, key: dict) -> UUID | None:
        query = select(AddressEntry.id)
        for column, value in key.items():
            attr = getattr(AddressEntry, column)
            query = query.where(attr.is_(None) if value is None else attr == value)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def get_address_entry(self, address_entry_id: UUID) -> AddressEntry | None:
        result = await self.db.execute(
            select(AddressEntry)
            .where(AddressEntry.id == address_entry_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def format_address_entry(self, address_entry_id) -> str | None:
        """Human-readable address for a stored entry, or None if unavailable."""
        try:
            entry = await self.get_address_entry(_as_uuid(address_entry_id))
        except (SQLAlchemyError, ValueError) as e:
            logger.warning(
                f"Failed to format address entry {address_entry_id}: {e}",
            )
            return None
        if entry is None:
            return None
        return format_address(address_entry_parts(entry))
