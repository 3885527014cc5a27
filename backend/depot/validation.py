from __future__ import annotations
from datetime import datetime
from depot.time_utils import parse_iso_datetime

from typing import Any, Iterable


# Maximum money amount accepted on input: 9,999,999,999.99 (in cents)
# Sums of amounts must stay inside a 64-bit integer column
MAX_AMOUNT_CENTS = 999_999_999_999


class ValidationError(ValueError):
    """400-level input problem."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., deleting a customer with orders)."""
    status_code = 409

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def ensure_payload(payload: Any) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def reject_unknown_fields(payload: dict, allowed: Iterable[str]) -> None:
    allowed = set(allowed)
    for k in payload.keys():
        if k not in allowed:
            raise ValidationError(f"Field not allowed: {k}")


def require_fields(payload: dict, required: Iterable[str]) -> None:
    missing = [f for f in required if payload.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(sorted(missing))}")


def coerce_int(field: str, value: Any) -> int | None:
    """
    Strict integer coercion.

    Accepts ints and plain digit strings. Rejects bools, floats, decimals
    and scientific notation ("1e5") so money never gets silently rounded.
    """
    if value is None:
        return None

    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if 'e' in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def coerce_amount(field: str, value: Any, *, minimum: int = 0) -> int | None:
    """Integer cents within [minimum, MAX_AMOUNT_CENTS]."""
    amount = coerce_int(field, value)
    if amount is None:
        return None
    if amount < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    if amount > MAX_AMOUNT_CENTS:
        raise ValidationError(f"{field} cannot exceed {MAX_AMOUNT_CENTS}")
    return amount


def coerce_str(field: str, value: Any, *, max_length: int | None = None, required: bool = False) -> str | None:
    if value is None:
        if required:
            raise ValidationError(f"{field} is required")
        return None
    text = str(value).strip()
    if not text:
        if required:
            raise ValidationError(f"{field} cannot be blank")
        return None
    if max_length and len(text) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return text


def coerce_bool(field: str, value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(f"{field} must be a boolean")


def coerce_datetime(field: str, value: Any) -> datetime | None:
    """Accept ISO-8601 strings (normalized to UTC-naive) or datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            dt = parse_iso_datetime(value)
        except ValueError:
            raise ValidationError(f"{field} must be an ISO-8601 datetime")
        if dt is None:
            raise ValidationError(f"{field} must be an ISO-8601 datetime")
        return dt
    raise ValidationError(f"{field} must be a datetime")


def coerce_choice(field: str, value: Any, choices: Iterable[str]) -> str | None:
    if value is None or value == "":
        return None
    text = str(value).strip().upper()
    choices = tuple(choices)
    if text not in choices:
        raise ValidationError(
            f"{field} must be one of: {', '.join(choices)}",
            {"field": field, "allowed": list(choices)},
        )
    return text
