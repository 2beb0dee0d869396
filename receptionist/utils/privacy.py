"""
PII masking for log output.

Masking is driven by field names: a string stored under ``phone`` is masked
as a phone number, under ``email`` as an email address, and so on. Field
names are compared case-insensitively with underscores and dashes removed,
so ``caller_name``, ``callerName`` and ``caller-name`` are the same field.

Masking builds a new structure and never mutates or rejects its input.
Masking already-masked output leaves it unchanged.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

PII_FIELDS = frozenset({
    "phonenumber",
    "phone",
    "email",
    "ssn",
    "dob",
    "dateofbirth",
    "address",
    "street",
    "driverslicense",
    "licensenumber",
    "vin",
    "creditcard",
    "accountnumber",
})

NAME_FIELDS = frozenset({"callername", "fullname", "firstname", "lastname", "name"})

REDACTED = "[REDACTED]"
REDACTED_ADDRESS = "[REDACTED ADDRESS]"
REDACTED_DOB = "[REDACTED DOB]"
MASKED_SSN = "***-**-****"

# Unicode-aware, unlike phone validation: every digit form gets masked.
_NON_DIGITS = re.compile(r"\D")
_STATE_ZIP = re.compile(r",?\s*([A-Z]{2})\s*(\d{5}(?:-\d{4})?)\s*$", re.IGNORECASE)
_BIRTH_YEAR = re.compile(r"\b(?:19|20)\d{2}\b")


def _field_key(field_name: Any) -> str:
    return re.sub(r"[_-]", "", str(field_name).lower())


def mask_phone(phone: str, show_last: int = 4) -> str:
    """Mask a phone number, keeping only the last ``show_last`` digits.

    US-shaped numbers keep their punctuation so they still read as phone
    numbers: ``(***) ***-1234`` and ``+1 (***) ***-1234``.
    """
    if not isinstance(phone, str) or not phone or "*" in phone:
        return phone

    digits = _NON_DIGITS.sub("", phone)
    if len(digits) <= show_last:
        return phone

    visible = digits[-show_last:] if show_last > 0 else ""
    if len(digits) == 10:
        return f"(***) ***-{visible}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+1 (***) ***-{visible}"
    return "*" * (len(digits) - show_last) + visible


def mask_email(email: str) -> str:
    if "@" not in email:
        return email
    local, _, domain = email.partition("@")
    if len(local) <= 1:
        return f"*@{domain}"
    return f"{local[0]}{'*' * (len(local) - 1)}@{domain}"


def mask_name(name: str) -> str:
    """``"John Smith"`` becomes ``"J. S."``."""
    words = name.split()
    if not words:
        return name
    return " ".join(f"{word[0]}." for word in words)


def mask_address(address: str) -> str:
    match = _STATE_ZIP.search(address)
    if match:
        return f"[REDACTED], {match.group(1).upper()} {match.group(2)}"
    return REDACTED_ADDRESS


def mask_ssn(ssn: str) -> str:
    digits = _NON_DIGITS.sub("", ssn)
    if len(digits) < 4:
        return MASKED_SSN
    return f"***-**-{digits[-4:]}"


def mask_dob(dob: str) -> str:
    match = _BIRTH_YEAR.search(dob)
    if match:
        return f"**/**/{match.group(0)}"
    return REDACTED_DOB


_PII_MASKERS = {
    "email": mask_email,
    "phone": mask_phone,
    "phonenumber": mask_phone,
    "ssn": mask_ssn,
    "dob": mask_dob,
    "dateofbirth": mask_dob,
    "address": mask_address,
    "street": mask_address,
}


def mask_field(field_name: Any, value: str) -> str:
    """Mask a single string value according to its field name."""
    key = _field_key(field_name)
    if key in NAME_FIELDS:
        return mask_name(value)
    if key in PII_FIELDS:
        masker = _PII_MASKERS.get(key)
        return masker(value) if masker else REDACTED
    return value


def _plain(value: Any) -> Any:
    """Turn models and dataclasses into plain containers before masking."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def mask_pii(value: Any) -> Any:
    """Recursively mask PII fields in ``value``.

    Mappings, lists, tuples, sets, pydantic models and dataclasses are walked;
    everything else is returned as-is. The result is always a new structure.
    """
    value = _plain(value)

    if isinstance(value, Mapping):
        masked: dict[Any, Any] = {}
        for key, item in value.items():
            if isinstance(item, str):
                masked[key] = mask_field(key, item)
            else:
                masked[key] = mask_pii(item)
        return masked

    if isinstance(value, (list, tuple, set, frozenset)):
        return [mask_pii(item) for item in value]

    return value
