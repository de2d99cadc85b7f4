"""
ISO-8601 date validation for project data fields.

Mechanical checks only: format by regular expression, then component
ranges (leap years, month lengths, timezone offset limits). Never raises;
every problem comes back as an error string.

Supported forms:
    YYYY-MM-DD
    YYYY-MM-DDTHH:mm:ss[.sss][Z|±HH:mm]
    HH:mm:ss[.sss][Z|±HH:mm]
"""

import calendar
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

MIN_YEAR = 1900
MAX_YEAR = 2100
MAX_OFFSET_MINUTES = 14 * 60

_TIME = r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})(?:\.(?P<millis>\d{3}))?"
_ZONE = r"(?P<zone>Z|(?P<sign>[+-])(?P<tz_hour>\d{2}):(?P<tz_minute>\d{2}))?"

DATE_PATTERN = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})(?:T" + _TIME + _ZONE + r")?$"
)
TIME_PATTERN = re.compile(r"^" + _TIME + _ZONE + r"$")


@dataclass(frozen=True)
class DateValidationResult:
    is_valid: bool
    error: Optional[str] = None
    kind: Optional[str] = None  # 'date', 'datetime' or 'time'


def validate_iso8601_date(value: Any) -> DateValidationResult:
    """
    Validate a date, datetime or time string.

    Examples:
        >>> validate_iso8601_date('2025-10-08').is_valid
        True
        >>> validate_iso8601_date('2025-02-30').error
        'Day must be between 01 and 28 for 2025-02, got 30'
    """
    if not isinstance(value, str) or not value:
        return DateValidationResult(False, "Date string must be a non-empty string")

    match = DATE_PATTERN.match(value)
    if match:
        error = _check_date(match)
        if error is None and match.group("hour") is not None:
            error = _check_time(match)
        kind = "datetime" if match.group("hour") is not None else "date"
        return DateValidationResult(error is None, error, kind if error is None else None)

    match = TIME_PATTERN.match(value)
    if match:
        error = _check_time(match)
        return DateValidationResult(error is None, error, "time" if error is None else None)

    return DateValidationResult(
        False,
        "Invalid ISO-8601 format. Supported formats: YYYY-MM-DD, "
        "YYYY-MM-DDTHH:mm:ss[.sss][Z|±HH:mm], HH:mm:ss[.sss][Z|±HH:mm]",
    )


def is_valid_iso8601_date(value: Any) -> bool:
    return validate_iso8601_date(value).is_valid


def validate_date_fields(data: dict, date_fields: Iterable[str]) -> List[str]:
    """
    Validate the date fields present in data.

    Absent, None and '' values are skipped (presence is the requirements
    validator's concern).

    Returns:
        Error strings formatted as '<field>: <error>'
    """
    errors = []
    for field_name in date_fields:
        value = data.get(field_name)
        if value is None or value == "":
            continue
        result = validate_iso8601_date(value)
        if not result.is_valid:
            errors.append(f"{field_name}: {result.error}")
    return errors


def _check_date(match) -> Optional[str]:
    year, month, day = (int(match.group(k)) for k in ("year", "month", "day"))

    if year < MIN_YEAR or year > MAX_YEAR:
        return f"Year must be between {MIN_YEAR} and {MAX_YEAR}, got {year}"
    if month < 1 or month > 12:
        return f"Month must be between 01 and 12, got {month:02d}"

    max_day = calendar.monthrange(year, month)[1]
    if day < 1 or day > max_day:
        return f"Day must be between 01 and {max_day:02d} for {year}-{month:02d}, got {day:02d}"

    return None


def _check_time(match) -> Optional[str]:
    hour, minute, second = (int(match.group(k)) for k in ("hour", "minute", "second"))

    if hour > 23:
        return f"Hour must be between 00 and 23, got {hour:02d}"
    if minute > 59:
        return f"Minute must be between 00 and 59, got {minute:02d}"
    if second > 59:
        return f"Second must be between 00 and 59, got {second:02d}"

    if match.group("sign"):
        tz_hour, tz_minute = int(match.group("tz_hour")), int(match.group("tz_minute"))
        if tz_hour > 23:
            return f"Timezone hours must be between 00 and 23, got {tz_hour:02d}"
        if tz_minute > 59:
            return f"Timezone minutes must be between 00 and 59, got {tz_minute:02d}"
        if tz_hour * 60 + tz_minute > MAX_OFFSET_MINUTES:
            sign = match.group("sign")
            return f"Total timezone offset cannot exceed 14 hours, got {sign}{tz_hour:02d}:{tz_minute:02d}"

    return None
