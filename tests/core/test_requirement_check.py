"""Tests for the requirement check — enforcement, de-duplication, and presence rules."""

from uuid import uuid4

from orderdesk.core.address_format import AddressParts, format_address
from orderdesk.core.requirement_check import (
    LocationRequirementRule, RequirementSpec, ServiceItem, ServiceRequirementLink,
    find_missing_requirements, has_address_block_data, has_value,
)

CRIMINAL = uuid4()
EDUCATION = uuid4()
CALIFORNIA = uuid4()
TEXAS = uuid4()

NAMES = {
    "service_names": {CRIMINAL: "Criminal Check", EDUCATION: "Education Check"},
    "location_names": {CALIFORNIA: "California", TEXAS: "Texas"},
}


def _field(name, tab="subject", data_type=None, disabled=False):
    field_data = {"collectionTab": tab}
    if data_type:
        field_data["dataType"] = data_type
    return RequirementSpec(
        id=uuid4(), name=name, type="field", field_data=field_data, disabled=disabled,
    )


def _document(name, scope="per_case"):
    return RequirementSpec(
        id=uuid4(), name=name, type="document", document_data={"scope": scope},
    )


def _item(service=CRIMINAL, location=CALIFORNIA, item_id="item-1"):
    return ServiceItem(service_id=service, location_id=location, item_id=item_id)


def _rule(req, service=CRIMINAL, location=CALIFORNIA, required=True):
    return LocationRequirementRule(
        service_id=service, location_id=location, requirement=req, is_required=required,
    )


def _link(req, service=CRIMINAL):
    return ServiceRequirementLink(service_id=service, requirement=req)


# ─── Enforcement ─────────────────────────────────────────────────

def test_required_subject_field_reported_missing():
    ssn = _field("SSN")
    result = find_missing_requirements(
        [_item()], [_link(ssn)], [_rule(ssn)], subject_values={}, **NAMES,
    )
    assert not result.is_valid
    assert result.missing_requirements.subject_fields == [
        {"field_name": "SSN", "service_location": "Criminal Check - California"},
    ]


def test_required_subject_field_satisfied():
    ssn = _field("SSN")
    result = find_missing_requirements(
        [_item()], [_link(ssn)], [_rule(ssn)], subject_values={"SSN": "123-45-6789"},
    )
    assert result.is_valid


def test_service_link_alone_never_enforces():
    ssn = _field("SSN")
    result = find_missing_requirements([_item()], [_link(ssn)], [], subject_values={})
    assert result.is_valid


def test_rule_with_is_required_false_does_not_enforce():
    ssn = _field("SSN")
    result = find_missing_requirements(
        [_item()], [_link(ssn)], [_rule(ssn, required=False)], subject_values={},
    )
    assert result.is_valid


def test_rule_for_other_location_does_not_enforce():
    ssn = _field("SSN")
    result = find_missing_requirements(
        [_item(location=TEXAS)], [_link(ssn)], [_rule(ssn, location=CALIFORNIA)],
    )
    assert result.is_valid


def test_location_rule_without_service_link_still_enforces():
    alias = _field("Alias")
    result = find_missing_requirements([_item()], [], [_rule(alias)], **NAMES)
    assert [m["field_name"] for m in result.missing_requirements.subject_fields] == ["Alias"]


def test_disabled_requirement_is_skipped():
    ssn = _field("SSN", disabled=True)
    result = find_missing_requirements([_item()], [_link(ssn)], [_rule(ssn)])
    assert result.is_valid


def test_form_requirements_are_not_checked():
    form = RequirementSpec(id=uuid4(), name="Consent", type="form")
    result = find_missing_requirements([_item()], [_link(form)], [_rule(form)])
    assert result.is_valid


def test_field_without_field_data_is_not_checked():
    bare = RequirementSpec(id=uuid4(), name="Legacy", type="field")
    result = find_missing_requirements([_item()], [], [_rule(bare)])
    assert result.is_valid


def test_empty_items_is_valid():
    ssn = _field("SSN")
    result = find_missing_requirements([], [_link(ssn)], [_rule(ssn)])
    assert result.is_valid
    assert result.to_dict() == {
        "is_valid": True,
        "missing_requirements": {"subject_fields": [], "search_fields": [], "documents": []},
    }


# ─── De-duplication ──────────────────────────────────────────────

def test_subject_field_reported_once_across_items_and_passes():
    ssn = _field("SSN")
    items = [
        _item(item_id="a"),
        _item(service=EDUCATION, item_id="b"),
    ]
    rules = [_rule(ssn), _rule(ssn, service=EDUCATION)]
    links = [_link(ssn), _link(ssn, service=EDUCATION)]
    result = find_missing_requirements(items, links, rules, **NAMES)
    assert len(result.missing_requirements.subject_fields) == 1
    # first item wins the label
    assert result.missing_requirements.subject_fields[0]["service_location"] == (
        "Criminal Check - California"
    )


def test_search_field_reported_once_per_item():
    alias = _field("Alias", tab="search")
    items = [_item(item_id="a"), _item(item_id="b")]
    result = find_missing_requirements(
        items, [_link(alias)], [_rule(alias)],
        search_values={"a": {"Alias": "Bob"}},
    )
    assert len(result.missing_requirements.search_fields) == 1
    assert result.missing_requirements.subject_fields == []


def test_search_field_reported_for_every_item_missing_it():
    alias = _field("Alias", tab="search")
    items = [_item(item_id="a"), _item(item_id="b")]
    result = find_missing_requirements(items, [_link(alias)], [_rule(alias)])
    assert len(result.missing_requirements.search_fields) == 2


def test_location_rule_alone_checks_every_matching_item():
    alias = _field("Alias", tab="search")
    transcript = _document("Transcript", scope="per_item")
    items = [_item(item_id="a"), _item(item_id="b")]
    result = find_missing_requirements(
        items, [], [_rule(alias), _rule(transcript)],
        search_values={"b": {"Alias": "Bob"}},
    )
    assert len(result.missing_requirements.search_fields) == 1
    assert len(result.missing_requirements.documents) == 2

    bare = find_missing_requirements(items, [], [_rule(alias)])
    assert len(bare.missing_requirements.search_fields) == 2


def test_per_case_document_reported_once():
    release = _document("Signed Release")
    items = [_item(item_id="a"), _item(item_id="b")]
    result = find_missing_requirements(items, [_link(release)], [_rule(release)])
    assert result.missing_requirements.documents == [
        {"document_name": "Signed Release", "service_location": "Unknown - Unknown"},
    ]


def test_per_item_document_reported_per_item():
    transcript = _document("Transcript", scope="per_item")
    items = [_item(item_id="a"), _item(item_id="b")]
    result = find_missing_requirements(items, [_link(transcript)], [_rule(transcript)])
    assert len(result.missing_requirements.documents) == 2


def test_document_presence_is_keyed_by_requirement_id():
    release = _document("Signed Release")
    result = find_missing_requirements(
        [_item()], [_link(release)], [_rule(release)],
        uploaded_documents={str(release.id): "file-123"},
    )
    assert result.is_valid


def test_labels_fall_back_to_item_names():
    ssn = _field("SSN")
    item = ServiceItem(
        service_id=CRIMINAL, location_id=CALIFORNIA, item_id="a",
        service_name="County Criminal", location_name="Los Angeles",
    )
    result = find_missing_requirements([item], [], [_rule(ssn)])
    assert result.missing_requirements.subject_fields[0]["service_location"] == (
        "County Criminal - Los Angeles"
    )


# ─── Presence ────────────────────────────────────────────────────

def test_has_value():
    assert has_value("x")
    assert has_value(0) is False
    assert not has_value("   ")
    assert not has_value(None)
    assert has_value(["a"])


def test_address_block_presence_from_dict():
    assert has_address_block_data({"city": "Austin"})
    assert has_address_block_data({"postal_code": "78701"})
    assert not has_address_block_data({"street2": "Apt 4", "county": "Travis"})
    assert not has_address_block_data({"city": "   "})


def test_address_block_presence_from_json_string():
    assert has_address_block_data('{"street1": "1 Main St"}')
    assert not has_address_block_data('{"street1": ""}')


def test_address_block_presence_from_rendered_string():
    assert has_address_block_data("1 Main St, Austin, Texas (TX)")
    assert has_address_block_data(format_address(AddressParts(postal_code="94105")))
    assert not has_address_block_data("  ")
    assert not has_address_block_data(None)


def test_non_object_json_strings_are_treated_as_plain_strings():
    assert has_address_block_data("94105")
    assert has_address_block_data("null")
    assert has_address_block_data("true")


def test_address_block_requirement_uses_block_presence():
    home = _field("Residence Address", data_type="address_block")
    rules = [_rule(home)]
    missing = find_missing_requirements(
        [_item()], [], rules, subject_values={"Residence Address": {"street2": "Apt 4"}},
    )
    present = find_missing_requirements(
        [_item()], [], rules, subject_values={"Residence Address": {"state": "TX"}},
    )
    assert not missing.is_valid
    assert present.is_valid
