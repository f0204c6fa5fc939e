from datetime import datetime, timezone
from typing import Any, Iterable, Type

from pydantic import BaseModel, ValidationError

from exceptions import (
    ClientInputError,
    BODY_MISSING,
    KEYS_INVALID_OR_MISSING,
    VALUES_INVALID,
)

# ----------------- BODY SHAPE -----------------

def body_is_empty(body: dict) -> bool:
    return isinstance(body, dict) and len(body) == 0

def allowed_keys_only(body: dict, allowed_keys: Iterable[str]) -> bool:
    """True when every key of the body belongs to allowed_keys."""
    allowed = set(allowed_keys)
    return all(key in allowed for key in body)

def required_keys_present(body: dict, required_keys: Iterable[str]) -> bool:
    """True when every required key is in the body, whatever its value (None included)."""
    return all(key in body for key in required_keys)

def check_body(body: Any, *, allowed: Iterable[str], required: Iterable[str] = (),
               fields: Type[BaseModel], keys_message: str = KEYS_INVALID_OR_MISSING) -> dict:
    """Run the body gates in order and return a copy of the accepted body.

    1. missing or empty body
    2. keys outside the allow-list, or required keys absent
    3. field values, checked against the `fields` schema
    """
    if body is None or body_is_empty(body):
        raise ClientInputError(BODY_MISSING)
    if not isinstance(body, dict):
        raise ClientInputError(keys_message)
    if not allowed_keys_only(body, allowed) or not required_keys_present(body, required):
        raise ClientInputError(keys_message)
    try:
        fields.model_validate(body)
    except ValidationError:
        raise ClientInputError(VALUES_INVALID)
    return dict(body)

MAX_ID = 2**63 - 1

def parse_id(raw: str, message: str = "Unvalid id") -> int:
    # ids are positive 64-bit integers in the store
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ClientInputError(message)
    if not 1 <= value <= MAX_ID:
        raise ClientInputError(message)
    return value

# ----------------- DATES -----------------
# canonical form: 2023-04-01T12:30:00.000Z (UTC, milliseconds)

def format_iso_date(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    # strftime("%Y") does not zero-pad years below 1000 on every platform
    return (f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
            f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
            f".{value.microsecond // 1000:03d}Z")

def parse_iso_date(value: str) -> datetime:
    """Parse an ISO-8601 string into an aware UTC datetime (naive input is taken as UTC)."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)

def is_iso_date_string(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        parsed = parse_iso_date(value)
    except (ValueError, OverflowError):
        return False
    return format_iso_date(parsed) == value

def date_strings_are_valid(body: dict, date_keys: Iterable[str]) -> bool:
    for key in date_keys:
        if key in body and not is_iso_date_string(body[key]):
            return False
    return True

def convert_dates(body: dict, date_keys: Iterable[str]) -> dict:
    result = dict(body)
    for key in date_keys:
        if result.get(key) is not None:
            result[key] = parse_iso_date(result[key])
    return result
