"""Phone number validation and normalization for spoken-back caller numbers."""

import re
from dataclasses import dataclass
from typing import Any, Optional

MIN_DIGITS = 10
MAX_DIGITS = 15
MIN_LOOSE_DIGITS = 7
MAX_NON_PHONE_RATIO = 0.2

_VALID_CHARS = re.compile(r"^[0-9\s\-().+]+$")
_NON_DIGITS = re.compile(r"[^0-9]")
_PHONE_CHARS = re.compile(r"[0-9\s\-().+]")


@dataclass(frozen=True)
class PhoneValidationResult:
    """Outcome of ``validate_phone``."""

    is_valid: bool
    normalized: Optional[str]
    digits: str
    error: Optional[str]


def extract_digits(value: str) -> str:
    """Return only the digits of ``value``."""
    return _NON_DIGITS.sub("", value)


def validate_phone(raw: Any) -> PhoneValidationResult:
    """Validate a phone number and normalize it to E.164 form.

    Ten-digit numbers are assumed to be US numbers and get ``+1``; eleven
    digits starting with ``1`` get ``+``; any other length in range is
    treated as already international.

    Examples:
        >>> validate_phone("(714) 555-1234").normalized
        '+17145551234'
        >>> validate_phone("555-1234").error
        'Phone number is too short. Expected at least 10 digits, got 7'
    """
    if not isinstance(raw, str) or not raw.strip():
        return PhoneValidationResult(False, None, "", "Phone number is required")

    digits = extract_digits(raw)

    if not _VALID_CHARS.match(raw.strip()):
        return PhoneValidationResult(
            False, None, digits, "Phone number contains invalid characters"
        )

    if len(digits) < MIN_DIGITS:
        return PhoneValidationResult(
            False,
            None,
            digits,
            f"Phone number is too short. Expected at least {MIN_DIGITS} digits, got {len(digits)}",
        )
    if len(digits) > MAX_DIGITS:
        return PhoneValidationResult(
            False,
            None,
            digits,
            f"Phone number is too long. Expected at most {MAX_DIGITS} digits, got {len(digits)}",
        )

    if len(digits) == 10:
        normalized = f"+1{digits}"
    else:
        normalized = f"+{digits}"
    return PhoneValidationResult(True, normalized, digits, None)


def looks_like_phone(value: Any) -> bool:
    """Lenient check for screening free text; not a substitute for validation."""
    if not isinstance(value, str) or not value:
        return False
    if len(extract_digits(value)) < MIN_LOOSE_DIGITS:
        return False
    non_phone = len(_PHONE_CHARS.sub("", value))
    return non_phone / len(value) <= MAX_NON_PHONE_RATIO


def national_digits(raw: str) -> str:
    """Digits of ``raw`` with a leading US country code dropped.

    >>> national_digits("+1 (714) 555-1234")
    '7145551234'
    """
    digits = extract_digits(raw)
    if len(digits) == 11 and digits.startswith("1"):
        return digits[1:]
    return digits
