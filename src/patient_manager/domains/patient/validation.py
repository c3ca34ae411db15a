"""
Patient validation rules.

One rule set serves both the API (which reports every message) and the
dashboard form (which shows the first message per field). Checks are pure
and never short-circuit across fields.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .models.patient import PATIENT_STATUSES

NAME_PATTERN = re.compile(r"[A-Za-z\s]+")
STREET_PATTERN = re.compile(r"[A-Za-z0-9\s.,#'\-/]+")
CITY_STATE_PATTERN = re.compile(r"[A-Za-z\s.'\-]+")
ZIP_PATTERN = re.compile(r"\d{5}", re.ASCII)

MAX_AGE_YEARS = 150


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_date_of_birth(value: Any) -> Optional[date]:
    """Parse an ISO date or datetime; None when unparseable"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = _text(value).strip()
    if not raw:
        return None

    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        return None


def earliest_date_of_birth(today: date) -> date:
    """today minus MAX_AGE_YEARS; Feb 29 rolls over to Mar 1"""
    try:
        return today.replace(year=today.year - MAX_AGE_YEARS)
    except ValueError:
        return date(today.year - MAX_AGE_YEARS, 3, 1)


def _check_pattern(
    field: str,
    value: Any,
    label: str,
    pattern: "re.Pattern[str]",
    invalid_message: str,
    required: bool = True
) -> List[Tuple[str, str]]:
    text = _text(value)
    if not text.strip():
        return [(field, f"{label} is required")] if required else []
    if not pattern.fullmatch(text):
        return [(field, invalid_message)]
    return []


def _check_date_of_birth(value: Any, today: date) -> List[Tuple[str, str]]:
    if not _text(value).strip():
        return [("dob", "Date of birth is required")]

    dob = parse_date_of_birth(value)
    if dob is None:
        return [("dob", "Date of birth must be a valid date")]

    if dob > today:
        return [("dob", "Date of birth cannot be in the future")]
    if dob < earliest_date_of_birth(today):
        return [("dob", f"Date of birth cannot be more than {MAX_AGE_YEARS} years in the past")]
    return []


def _check_status(value: Any) -> List[Tuple[str, str]]:
    status = _text(value).strip()
    if not status:
        return [("status", "Status is required")]
    if status not in PATIENT_STATUSES:
        return [("status", f"Status must be one of: {', '.join(PATIENT_STATUSES)}")]
    return []


def collect_violations(data: Mapping[str, Any], today: Optional[date] = None) -> List[Tuple[str, str]]:
    """Every (field, message) violation for a camelCase patient record"""
    today = today or date.today()
    address = data.get("address") or {}
    if not isinstance(address, Mapping):
        address = {}

    violations: List[Tuple[str, str]] = []
    violations += _check_pattern(
        "firstName", data.get("firstName"), "First name", NAME_PATTERN,
        "First name must contain only letters and spaces"
    )
    violations += _check_pattern(
        "middleName", data.get("middleName"), "Middle name", NAME_PATTERN,
        "Middle name must contain only letters and spaces", required=False
    )
    violations += _check_pattern(
        "lastName", data.get("lastName"), "Last name", NAME_PATTERN,
        "Last name must contain only letters and spaces"
    )
    violations += _check_date_of_birth(data.get("dob"), today)
    violations += _check_status(data.get("status"))
    violations += _check_pattern(
        "street", address.get("street"), "Street address", STREET_PATTERN,
        "Street address contains invalid characters"
    )
    violations += _check_pattern(
        "city", address.get("city"), "City", CITY_STATE_PATTERN,
        "City contains invalid characters"
    )
    violations += _check_pattern(
        "state", address.get("state"), "State", CITY_STATE_PATTERN,
        "State contains invalid characters"
    )
    violations += _check_pattern(
        "zip", address.get("zip"), "Zip code", ZIP_PATTERN,
        "Zip code must be exactly 5 digits"
    )
    return violations


def validate_patient(data: Mapping[str, Any], today: Optional[date] = None) -> List[str]:
    """Human-readable violation messages; empty when the record is valid"""
    return [message for _, message in collect_violations(data, today)]


def validate_patient_fields(data: Mapping[str, Any], today: Optional[date] = None) -> Dict[str, str]:
    """First violation per field, for inline form feedback"""
    errors: Dict[str, str] = {}
    for field, message in collect_violations(data, today):
        errors.setdefault(field, message)
    return errors


def validate_patient_id(value: Any) -> List[str]:
    """Identifier must be a positive integer"""
    text = _text(value).strip()
    if not text.isdecimal() or int(text) < 1:
        return ["Patient ID must be a positive integer"]
    return []
