"""Requirement Check — merges the two requirement sources and reports what is missing.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - A requirement is enforced for (service, location) ONLY when a location rule
      exists for that exact triple with is_required=True; a service-level link alone
      never enforces anything
    - Subject fields are checked once per requirement id for the whole order
    - Search fields are checked once per (requirement id, item id)
    - Documents are de-duplicated by requirement id (per_case) or
      (requirement id, item id) (per_item); presence is always looked up by
      requirement id
    - The service-driven pass and the location-driven pass share the same
      de-duplication sets: no pair is ever reported twice
    - is_valid ⇔ all three missing lists are empty

Design Decisions:
    - Plain dataclasses in, plain dataclasses out: the shell maps ORM rows before
      calling, which keeps this module testable without a database
    - Address-block fields count as present when any of street1/city/state/postal
      code is a non-blank string; JSON-encoded objects are unwrapped first, any
      other string follows the plain non-blank rule
"""

import json
from dataclasses import dataclass, field
from typing import Iterable, Mapping
from uuid import UUID

from orderdesk.core.domain_types import (
    CollectionTab, DocumentScope, FieldDataType, RequirementType,
)

UNKNOWN_LABEL = "Unknown"

ADDRESS_BLOCK_KEYS = (
    ("street1",), ("city",), ("state",), ("postalCode", "postal_code"),
)


# ─── Inputs ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class RequirementSpec:
    """Catalog entry as seen by the checker."""
    id: UUID
    name: str
    type: str
    field_data: dict | None = None
    document_data: dict | None = None
    disabled: bool = False

    @property
    def collection_tab(self) -> str:
        return (self.field_data or {}).get("collectionTab") or CollectionTab.SUBJECT.value

    @property
    def document_scope(self) -> str:
        return (self.document_data or {}).get("scope") or DocumentScope.PER_CASE.value

    @property
    def is_address_block(self) -> bool:
        return (self.field_data or {}).get("dataType") == FieldDataType.ADDRESS_BLOCK.value


@dataclass(frozen=True)
class ServiceItem:
    """One (service, location) line the customer picked. item_id is client-issued."""
    service_id: UUID
    location_id: UUID
    item_id: str
    service_name: str | None = None
    location_name: str | None = None


@dataclass(frozen=True)
class ServiceRequirementLink:
    """Default service → requirement association (ordering only)."""
    service_id: UUID
    requirement: RequirementSpec


@dataclass(frozen=True)
class LocationRequirementRule:
    """Per-(service, location) override: the only source of enforcement."""
    service_id: UUID
    location_id: UUID
    requirement: RequirementSpec
    is_required: bool


# ─── Outputs ─────────────────────────────────────────────────────

@dataclass
class MissingRequirements:
    subject_fields: list[dict] = field(default_factory=list)
    search_fields: list[dict] = field(default_factory=list)
    documents: list[dict] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.subject_fields or self.search_fields or self.documents)

    def to_dict(self) -> dict:
        return {
            "subject_fields": list(self.subject_fields),
            "search_fields": list(self.search_fields),
            "documents": list(self.documents),
        }


@dataclass
class ValidationResult:
    is_valid: bool
    missing_requirements: MissingRequirements

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "missing_requirements": self.missing_requirements.to_dict(),
        }

    @classmethod
    def empty(cls, is_valid: bool = True) -> "ValidationResult":
        return cls(is_valid=is_valid, missing_requirements=MissingRequirements())


# ─── Presence ────────────────────────────────────────────────────

def has_value(value) -> bool:
    """Non-blank string, or any other truthy value."""
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


def _unwrap_address_block(value):
    """JSON-encoded object → dict; every other string is returned untouched."""
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return value
        return decoded if isinstance(decoded, dict) else value
    return value


def has_address_block_data(value) -> bool:
    """True when any core address component is a non-blank string."""
    block = _unwrap_address_block(value)
    if isinstance(block, str):
        # already rendered for display, or a stored address reference
        return has_value(block)
    if not isinstance(block, dict):
        return False
    for keys in ADDRESS_BLOCK_KEYS:
        for key in keys:
            component = block.get(key)
            if isinstance(component, str) and component.strip():
                return True
    return False


def is_present(requirement: RequirementSpec, value) -> bool:
    if requirement.is_address_block:
        return has_address_block_data(value)
    return has_value(value)


# ─── Enforcement map ─────────────────────────────────────────────

RequiredKey = tuple[UUID, UUID, UUID]


def build_required_map(
    rules: Iterable[LocationRequirementRule],
) -> dict[RequiredKey, bool]:
    return {
        (r.service_id, r.location_id, r.requirement.id): r.is_required
        for r in rules
    }


def effective_required(
    required_map: Mapping[RequiredKey, bool],
    service_id: UUID, location_id: UUID, requirement_id: UUID,
) -> bool:
    return bool(required_map.get((service_id, location_id, requirement_id), False))


def service_location_label(
    item: ServiceItem,
    service_names: Mapping[UUID, str],
    location_names: Mapping[UUID, str],
) -> str:
    service = service_names.get(item.service_id) or item.service_name or UNKNOWN_LABEL
    location = location_names.get(item.location_id) or item.location_name or UNKNOWN_LABEL
    return f"{service} - {location}"


# ─── Checker ─────────────────────────────────────────────────────

class _MissingCollector:
    """Accumulates missing items across both passes with shared dedup sets."""

    def __init__(
        self,
        subject_values: Mapping,
        search_values: Mapping,
        uploaded_documents: Mapping,
    ):
        self.subject_values = subject_values
        self.search_values = search_values
        self.uploaded_documents = uploaded_documents
        self.missing = MissingRequirements()
        self._checked_subject: set[UUID] = set()
        self._checked_search: set[tuple[UUID, str]] = set()
        self._checked_documents: set[UUID | tuple[UUID, str]] = set()

    def check(self, requirement: RequirementSpec, item: ServiceItem, label: str) -> None:
        if requirement.type == RequirementType.FIELD.value and requirement.field_data is not None:
            if requirement.collection_tab == CollectionTab.SUBJECT.value:
                self._check_subject(requirement, label)
            else:
                self._check_search(requirement, item, label)
        elif (
            requirement.type == RequirementType.DOCUMENT.value
            and requirement.document_data is not None
        ):
            self._check_document(requirement, item, label)

    def _check_subject(self, requirement: RequirementSpec, label: str) -> None:
        if requirement.id in self._checked_subject:
            return
        self._checked_subject.add(requirement.id)
        if not is_present(requirement, self.subject_values.get(requirement.name)):
            self.missing.subject_fields.append(
                {"field_name": requirement.name, "service_location": label},
            )

    def _check_search(
        self, requirement: RequirementSpec, item: ServiceItem, label: str,
    ) -> None:
        key = (requirement.id, item.item_id)
        if key in self._checked_search:
            return
        self._checked_search.add(key)
        item_values = self.search_values.get(item.item_id) or {}
        if not is_present(requirement, item_values.get(requirement.name)):
            self.missing.search_fields.append(
                {"field_name": requirement.name, "service_location": label},
            )

    def _check_document(
        self, requirement: RequirementSpec, item: ServiceItem, label: str,
    ) -> None:
        key = (
            requirement.id
            if requirement.document_scope == DocumentScope.PER_CASE.value
            else (requirement.id, item.item_id)
        )
        if key in self._checked_documents:
            return
        self._checked_documents.add(key)
        if not self.uploaded_documents.get(str(requirement.id)):
            self.missing.documents.append(
                {"document_name": requirement.name, "service_location": label},
            )


def find_missing_requirements(
    items: list[ServiceItem],
    service_links: Iterable[ServiceRequirementLink],
    location_rules: list[LocationRequirementRule],
    subject_values: Mapping | None = None,
    search_values: Mapping | None = None,
    uploaded_documents: Mapping | None = None,
    service_names: Mapping[UUID, str] | None = None,
    location_names: Mapping[UUID, str] | None = None,
) -> ValidationResult:
    """Classify every enforced requirement the order does not yet satisfy."""
    service_names = service_names or {}
    location_names = location_names or {}
    required_map = build_required_map(location_rules)
    collector = _MissingCollector(
        subject_values or {}, search_values or {}, uploaded_documents or {},
    )

    # Pass 1: service-level associations, enforced only through location rules
    for link in service_links:
        if link.requirement.disabled:
            continue
        for item in items:
            if item.service_id != link.service_id:
                continue
            if not effective_required(
                required_map, item.service_id, item.location_id, link.requirement.id,
            ):
                continue
            collector.check(
                link.requirement, item,
                service_location_label(item, service_names, location_names),
            )

    # Pass 2: location rules with no service-level association; every matching
    # item is checked, so search fields and per_item documents report per item
    for rule in location_rules:
        if rule.requirement.disabled or not rule.is_required:
            continue
        for item in items:
            if item.service_id != rule.service_id or item.location_id != rule.location_id:
                continue
            collector.check(
                rule.requirement, item,
                service_location_label(item, service_names, location_names),
            )

    missing = collector.missing
    return ValidationResult(is_valid=missing.is_empty(), missing_requirements=missing)
