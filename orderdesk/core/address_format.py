"""Address Formatting — pure helpers shared by address dedup and value resolution.

Invariants:
    - normalize_components() maps every falsy component to None (exact-match keys)
    - An address with no street1, city, state, or postal code is "empty"
    - Display order: street1, street2, city, county, "State (CODE)", postal code, country
    - Country is omitted for the home country (DEFAULT_COUNTRY_NAME)
"""

import re
from dataclasses import dataclass

DEFAULT_COUNTRY_NAME = "United States"

_STATE_WITH_CODE = re.compile(r"^(.+?) \((.+?)\)$")


@dataclass(frozen=True)
class AddressParts:
    """Display-ready address pieces. Any of them may be missing."""
    street1: str | None = None
    street2: str | None = None
    city: str | None = None
    county: str | None = None
    state: str | None = None
    state_code: str | None = None
    postal_code: str | None = None
    country: str | None = None


def _first(data: dict, *keys: str):
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


def normalize_components(address_data: dict) -> dict[str, str | None]:
    """Exact-match key for an address payload (camelCase or snake_case input)."""
    return {
        "street1": _first(address_data, "street1"),
        "street2": _first(address_data, "street2"),
        "city": _first(address_data, "city"),
        "state_id": _first(address_data, "stateId", "state_id"),
        "county_id": _first(address_data, "countyId", "county_id"),
        "postal_code": _first(address_data, "postalCode", "postal_code"),
    }


def is_effectively_empty(address_data: dict) -> bool:
    return not any(
        _first(address_data, *keys) for keys in (
            ("street1",), ("city",), ("state",), ("postalCode", "postal_code"),
        )
    )


def split_state_label(label: str) -> tuple[str, str | None]:
    """'California (CA)' → ('California', 'CA'); plain names pass through."""
    match = _STATE_WITH_CODE.match(label)
    if match:
        return match.group(1), match.group(2)
    return label, None


def state_label(name: str, code: str | None) -> str:
    return f"{name} ({code})" if code else name


def format_address(parts: AddressParts) -> str:
    """Comma-joined display string; empty string when nothing is present."""
    pieces = [
        parts.street1,
        parts.street2,
        parts.city,
        parts.county,
        state_label(parts.state, parts.state_code) if parts.state else None,
        parts.postal_code,
    ]
    if parts.country and parts.country != DEFAULT_COUNTRY_NAME:
        pieces.append(parts.country)
    return ", ".join(p for p in pieces if p)
