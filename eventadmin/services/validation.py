"""Event form validation.

Every field is checked independently and all errors are reported together so
the caller can highlight each offending field at once. Nothing here touches
the database.
"""

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Mapping, Optional

from eventadmin.core.errors import DomainError
from eventadmin.core.result import Err, Ok, Result

FieldErrors = dict[str, DomainError]

EVENT_FIELDS = ("title", "description", "date", "location", "capacity", "price")

_CENTS = Decimal("0.01")

# Column limits: Integer capacity, Numeric(10, 2) price
MAX_CAPACITY = 2**31 - 1
MAX_PRICE = Decimal("99999999.99")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_title(value: Any, today: dt.date) -> tuple[Any, Optional[DomainError]]:
    if _is_blank(value):
        return None, DomainError.required("Title is required")
    return str(value).strip(), None


def _check_description(value: Any, today: dt.date) -> tuple[Any, Optional[DomainError]]:
    if _is_blank(value):
        return None, None
    return str(value).strip(), None


def _parse_date(value: Any) -> Optional[dt.date]:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    text = str(value).strip()
    try:
        if "T" in text:
            return dt.datetime.fromisoformat(text).date()
        return dt.date.fromisoformat(text)
    except ValueError:
        return None


def _check_date(value: Any, today: dt.date) -> tuple[Any, Optional[DomainError]]:
    if _is_blank(value):
        return None, DomainError.required("Date is required")
    parsed = _parse_date(value)
    if parsed is None:
        return None, DomainError.invalid_date("Date must be a valid calendar date")
    # today itself is rejected
    if parsed <= today:
        return None, DomainError.invalid_date("Date must be in the future")
    return parsed, None


def _check_location(value: Any, today: dt.date) -> tuple[Any, Optional[DomainError]]:
    if _is_blank(value):
        return None, DomainError.required("Location is required")
    return str(value).strip(), None


def _parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _check_capacity(value: Any, today: dt.date) -> tuple[Any, Optional[DomainError]]:
    if _is_blank(value):
        return None, DomainError.required("Capacity is required")
    capacity = _parse_int(value)
    if capacity is None or capacity <= 0:
        return None, DomainError.invalid_number("Capacity must be greater than 0")
    if capacity > MAX_CAPACITY:
        return None, DomainError.invalid_number(f"Capacity must be at most {MAX_CAPACITY}")
    return capacity, None


def _check_price(value: Any, today: dt.date) -> tuple[Any, Optional[DomainError]]:
    if _is_blank(value):
        return Decimal("0.00"), None
    if isinstance(value, bool):
        return None, DomainError.invalid_number("Price must be a non-negative number")
    try:
        price = Decimal(str(value).strip())
        if price.is_finite() and price >= 0:
            price = price.quantize(_CENTS, rounding=ROUND_HALF_UP)
            if price > MAX_PRICE:
                return None, DomainError.invalid_number(f"Price must be at most {MAX_PRICE}")
            return price, None
    except InvalidOperation:
        pass
    return None, DomainError.invalid_number("Price must be a non-negative number")


_CHECKS: dict[str, Callable[[Any, dt.date], tuple[Any, Optional[DomainError]]]] = {
    "title": _check_title,
    "description": _check_description,
    "date": _check_date,
    "location": _check_location,
    "capacity": _check_capacity,
    "price": _check_price,
}


def validate_event_draft(
    draft: Mapping[str, Any],
    *,
    today: Optional[dt.date] = None,
    fields: Optional[Iterable[str]] = None,
) -> Result[dict[str, Any], FieldErrors]:
    """Validate and normalize a draft event.

    Returns ``Ok(payload)`` with trimmed strings, an ``int`` capacity and a
    ``Decimal`` price, or ``Err(errors)`` mapping each failing field to its
    error. ``fields`` limits the check to a subset, which is how partial
    updates are validated.
    """
    today = today or dt.date.today()
    selected = EVENT_FIELDS if fields is None else [name for name in EVENT_FIELDS if name in set(fields)]

    payload: dict[str, Any] = {}
    errors: FieldErrors = {}
    for name in selected:
        value, error = _CHECKS[name](draft.get(name), today)
        if error is not None:
            errors[name] = error
        else:
            payload[name] = value

    if errors:
        return Err(errors)
    return Ok(payload)


def revalidate_field(
    errors: Mapping[str, DomainError],
    draft: Mapping[str, Any],
    field: str,
    *,
    today: Optional[dt.date] = None,
) -> FieldErrors:
    """Recheck a single edited field, leaving every other field's error as it was."""
    if field not in _CHECKS:
        raise KeyError(f"Unknown event field '{field}'")
    updated = {name: error for name, error in errors.items() if name != field}
    _, error = _CHECKS[field](draft.get(field), today or dt.date.today())
    if error is not None:
        updated[field] = error
    return updated
