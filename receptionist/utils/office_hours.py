"""
Office-hours check in the agency's local time (Pacific by default).

Holidays are not considered: a weekday holiday reports the office as open
and "tomorrow" as the next business day.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "America/Los_Angeles"
OPEN_HOUR = 9
CLOSE_HOUR = 17

ZONE_LABELS = {
    "America/Los_Angeles": "Pacific Time",
    "America/Denver": "Mountain Time",
    "America/Boise": "Mountain Time",
    "America/Phoenix": "Mountain Time",
    "America/Chicago": "Central Time",
    "America/New_York": "Eastern Time",
    "America/Anchorage": "Alaska Time",
    "Pacific/Honolulu": "Hawaii Time",
}

FRIDAY = 4
SATURDAY = 5
SUNDAY = 6


@dataclass(frozen=True)
class OfficeHoursResult:
    """Open/closed state plus caller-facing wording."""

    is_open: bool
    current_time: str
    current_day: str
    next_business_day: str
    message: str


def _format_hour(hour: int) -> str:
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12} {suffix}"


def _format_time(local: datetime) -> str:
    """``9:05 AM`` style, without a leading zero on the hour."""
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{local.hour % 12 or 12}:{local.minute:02d} {suffix}"


def zone_label(tz: str, local: Optional[datetime] = None) -> str:
    """Spoken name of a time zone: ``"Pacific Time"``, else its abbreviation."""
    if tz in ZONE_LABELS:
        return ZONE_LABELS[tz]
    local = local or datetime.now(ZoneInfo(tz))
    return local.tzname() or tz


def next_business_day(local: datetime, close_hour: int = CLOSE_HOUR) -> str:
    """Spoken name of the next business day relative to ``local``."""
    weekday = local.weekday()
    if weekday in (SATURDAY, SUNDAY):
        return "Monday"
    if weekday == FRIDAY and local.hour >= close_hour:
        return "Monday"
    return "tomorrow"


def check_office_hours(
    instant: Optional[datetime] = None,
    tz: str = DEFAULT_TIMEZONE,
    open_hour: int = OPEN_HOUR,
    close_hour: int = CLOSE_HOUR,
) -> OfficeHoursResult:
    """
    Check whether the office is open at ``instant`` (default: now).

    Open Monday through Friday from ``open_hour`` inclusive to ``close_hour``
    exclusive, local time. Naive datetimes are interpreted as UTC.
    """
    now = instant or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(ZoneInfo(tz))

    is_weekday = local.weekday() < SATURDAY
    is_open = is_weekday and open_hour <= local.hour < close_hour

    time_str = _format_time(local)
    day_name = local.strftime("%A")
    next_day = next_business_day(local, close_hour)
    label = zone_label(tz, local)

    if is_open:
        message = f"The office is currently open. It's {time_str} on {day_name} {label}."
    else:
        message = (
            f"The office is currently closed. It's {time_str} on {day_name} {label}. "
            f"Office hours are Monday through Friday, {_format_hour(open_hour)} to "
            f"{_format_hour(close_hour)} {label}. "
            f"Someone from our team will be back in touch {next_day}."
        )

    return OfficeHoursResult(
        is_open=is_open,
        current_time=time_str,
        current_day=day_name,
        next_business_day=next_day,
        message=message,
    )
