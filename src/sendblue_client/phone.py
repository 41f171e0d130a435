from __future__ import annotations

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat, ValidationResult

from .config import DEFAULT_REGION
from .errors import PhoneNumberParseError


def normalize(raw: str, region: str = DEFAULT_REGION) -> str:
    """
    Normalize a user-entered phone number to E.164 (e.g. "+15551234567").

    Numbers without a country code are read as belonging to `region`.
    Validation is loose: the number must be a plausible full-length number
    for its country (local-only short forms are rejected), but it is not
    checked against allocated ranges or carriers.

    Raises PhoneNumberParseError; phonenumbers' own exceptions never escape.
    """
    try:
        num = phonenumbers.parse(raw, region)
    except NumberParseException as exc:
        raise PhoneNumberParseError(raw) from exc

    # Local-only lengths (e.g. 7-digit US numbers) have no dialable E.164 form
    if phonenumbers.is_possible_number_with_reason(num) != ValidationResult.IS_POSSIBLE:
        raise PhoneNumberParseError(raw)

    return phonenumbers.format_number(num, PhoneNumberFormat.E164)


def is_normalizable(raw: str, region: str = DEFAULT_REGION) -> bool:
    try:
        normalize(raw, region)
    except PhoneNumberParseError:
        return False
    return True
