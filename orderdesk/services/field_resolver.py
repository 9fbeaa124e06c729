"""Field Value Resolver — turns reference ids inside submitted values into display text.

Invariants:
    - Never fails the caller: lookup errors are logged as warnings and the original
      value passes through unchanged
    - Falsy values pass through unchanged
    - Address-like dicts ("address"/"residence" in the field name) become a
      comma-joined string with embedded state/county ids resolved
    - UUID strings are dispatched on the field name, first successful match wins:
      address/residence → address entry, location/country/region → location,
      state/province → state, county → county

Design Decisions:
    - Field-name substring heuristics are kept as-is; a tagged reference kind on the
      requirement would be sturdier but changes the authoring side
    - Display-only: the resolved map is what gets stored, ids are not kept
"""

import json
import logging
import re
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.core.address_format import (
    AddressParts, format_address, split_state_label, state_label,
)
from orderdesk.models.location import Location
from orderdesk.services.address_entries import AddressEntryService

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE,
)

ADDRESS_HINTS = ("address", "residence")
LOCATION_HINTS = ("location", "country", "region")
STATE_HINTS = ("state", "province")
COUNTY_HINTS = ("county",)


def is_uuid(value) -> bool:
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))


def _name_has(field_name: str, hints: tuple[str, ...]) -> bool:
    lowered = field_name.lower()
    return any(hint in lowered for hint in hints)


class FieldValueResolver:
    """Resolves ids embedded in subject/search values."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self._addresses = AddressEntryService(db)

    async def _get_location(self, location_id: str) -> Location | None:
        result = await self.db.execute(
            select(Location).where(Location.id == UUID(location_id)),
        )
        return result.scalar_one_or_none()

    async def resolve_state_field(self, state_id: str) -> str | None:
        """'State Name (XX)' for a state/province id."""
        try:
            state = await self._get_location(state_id)
        except (SQLAlchemyError, ValueError) as e:
            logger.warning(f"Failed to resolve state id {state_id}: {e}")
            return None
        if state is None:
            return None
        return state_label(state.subregion1 or state.name, state.code2)

    async def resolve_county_field(self, county_id: str) -> str | None:
        try:
            county = await self._get_location(county_id)
        except (SQLAlchemyError, ValueError) as e:
            logger.warning(f"Failed to resolve county id {county_id}: {e}")
            return None
        if county is None:
            return None
        return county.subregion2 or county.name

    async def resolve_location_field(self, location_id: str, field_name: str) -> str | None:
        """Most specific name in the hierarchy, suffixed with its code."""
        try:
            location = await self._get_location(location_id)
        except (SQLAlchemyError, ValueError) as e:
            logger.warning(
                f"Failed to resolve location id {location_id}: {e}",
                extra={"field_name": field_name},
            )
            return None
        if location is None:
            return None
        return state_label(location.most_specific_name, location.code2)

    async def resolve_address_field(self, address_id: str) -> str | None:
        formatted = await self._addresses.format_address_entry(address_id)
        return formatted or None

    async def resolve_address_object(self, address: dict) -> str:
        """Format an address block, resolving state/county ids it carries."""
        state = address.get("state")
        state_code = address.get("stateCode")
        if is_uuid(state):
            resolved = await self.resolve_state_field(state)
            if resolved:
                state, resolved_code = split_state_label(resolved)
                state_code = resolved_code or state_code

        county = address.get("county")
        if is_uuid(county):
            county = await self.resolve_county_field(county) or county

        formatted = format_address(AddressParts(
            street1=address.get("street1"),
            street2=address.get("street2"),
            city=address.get("city"),
            county=county,
            state=state,
            state_code=state_code,
            postal_code=address.get("postalCode") or address.get("postal_code"),
        ))
        return formatted or json.dumps(address)

    async def _resolve_reference(self, field_name: str, value: str) -> str | None:
        if _name_has(field_name, ADDRESS_HINTS):
            resolved = await self.resolve_address_field(value)
            if resolved:
                return resolved
        if _name_has(field_name, LOCATION_HINTS):
            resolved = await self.resolve_location_field(value, field_name)
            if resolved:
                return resolved
        if _name_has(field_name, STATE_HINTS):
            resolved = await self.resolve_state_field(value)
            if resolved:
                return resolved
        if _name_has(field_name, COUNTY_HINTS):
            resolved = await self.resolve_county_field(value)
            if resolved:
                return resolved
        return None

    async def resolve_field_values(self, values: dict | None) -> dict:
        """Same keys, with resolvable ids replaced by display strings."""
        resolved: dict = {}
        for field_name, value in (values or {}).items():
            if not value:
                resolved[field_name] = value
            elif isinstance(value, dict) and _name_has(field_name, ADDRESS_HINTS):
                resolved[field_name] = await self.resolve_address_object(value)
            elif is_uuid(value):
                display = await self._resolve_reference(field_name, value)
                resolved[field_name] = display if display is not None else value
            else:
                resolved[field_name] = value
        return resolved
