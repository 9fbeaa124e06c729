"""Tests for address formatting helpers."""

from orderdesk.core.address_format import (
    AddressParts, format_address, is_effectively_empty, normalize_components,
    split_state_label, state_label,
)


def test_normalize_components_accepts_camel_and_snake_case():
    camel = normalize_components({
        "street1": "1 Main St", "stateId": "s-1", "countyId": "c-1", "postalCode": "90210",
    })
    snake = normalize_components({
        "street1": "1 Main St", "state_id": "s-1", "county_id": "c-1", "postal_code": "90210",
    })
    assert camel == snake
    assert camel["street2"] is None


def test_normalize_components_maps_falsy_to_none():
    key = normalize_components({"street1": "", "city": None, "postalCode": "0"})
    assert key["street1"] is None
    assert key["city"] is None
    assert key["postal_code"] == "0"


def test_effectively_empty_address():
    assert is_effectively_empty({})
    assert is_effectively_empty({"street2": "Apt 4", "countyId": "x"})
    assert not is_effectively_empty({"city": "Springfield"})
    assert not is_effectively_empty({"postal_code": "90210"})


def test_state_label_round_trip():
    assert state_label("California", "CA") == "California (CA)"
    assert state_label("Ontario", None) == "Ontario"
    assert split_state_label("California (CA)") == ("California", "CA")
    assert split_state_label("Ontario") == ("Ontario", None)


def test_format_address_orders_components():
    parts = AddressParts(
        street1="1 Main St", street2="Apt 4", city="Springfield",
        county="Sangamon", state="Illinois", state_code="IL", postal_code="62701",
    )
    assert format_address(parts) == (
        "1 Main St, Apt 4, Springfield, Sangamon, Illinois (IL), 62701"
    )


def test_format_address_omits_home_country():
    assert format_address(AddressParts(city="Austin", country="United States")) == "Austin"
    assert format_address(AddressParts(city="Toronto", country="Canada")) == "Toronto, Canada"


def test_format_address_empty():
    assert format_address(AddressParts()) == ""
