from receptionist.utils.office_hours import OfficeHoursResult, check_office_hours
from receptionist.utils.phone import (
    PhoneValidationResult,
    looks_like_phone,
    national_digits,
    validate_phone,
)
from receptionist.utils.privacy import mask_phone, mask_pii

__all__ = [
    "OfficeHoursResult", "check_office_hours",
    "PhoneValidationResult", "looks_like_phone", "national_digits", "validate_phone",
    "mask_phone", "mask_pii",
]
