"""Subject Normalization — canonical subject keys from free-form requirement labels.

Invariants:
    - SUBJECT_FIELD_ALIASES is read-only; unknown labels keep their original key
    - Later string values win when two labels alias to the same key
    - A non-string value never overwrites a non-empty base-subject key
    - Result never contains None, empty, or whitespace-only values
    - Strings from the resolved values are stored trimmed
"""

from types import MappingProxyType

SUBJECT_FIELD_ALIASES = MappingProxyType({
    # Name
    "First Name": "firstName",
    "first_name": "firstName",
    "Last Name": "lastName",
    "Surname/Last Name": "lastName",
    "surname": "lastName",
    "last_name": "lastName",
    "Middle Name": "middleName",
    "middle_name": "middleName",
    # Contact
    "Email Address": "email",
    "email_address": "email",
    "Phone Number": "phone",
    "phoneNumber": "phone",
    "phone_number": "phone",
    # Address
    "Street Address": "address",
    "Residence Address": "address",
    "residenceAddress": "address",
    # Personal
    "Date of Birth": "dateOfBirth",
    "DOB": "dateOfBirth",
    "dob": "dateOfBirth",
    "date_of_birth": "dateOfBirth",
})


def canonical_key(label: str) -> str:
    return SUBJECT_FIELD_ALIASES.get(label, label)


def is_blank(value) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def normalize_subject(base_subject: dict | None, resolved_values: dict | None) -> dict:
    """Merge resolved requirement values onto the base subject under canonical keys."""
    normalized = dict(base_subject or {})

    for label, value in (resolved_values or {}).items():
        if is_blank(value):
            continue
        key = canonical_key(label)
        # a non-string value only fills a key the base subject left empty
        if isinstance(value, str):
            normalized[key] = value.strip()
        elif not normalized.get(key):
            normalized[key] = value

    return {k: v for k, v in normalized.items() if not is_blank(v)}
