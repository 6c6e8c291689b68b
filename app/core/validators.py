"""
Validation Utilities for the Employee Records API

Plain checks used by the pydantic schemas. They raise ValueError so pydantic
collects every failure of a payload into one error list.
"""

import re
from datetime import date
from typing import Optional


PHONE_PATTERN = re.compile(r'^\+?[1-9]\d{1,14}$')


def validate_phone(phone: str) -> str:
    """Validate an international phone number (optional +, up to 15 digits)."""
    if not PHONE_PATTERN.match(phone):
        raise ValueError("Please provide a valid phone number")
    return phone


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_past_date(value: date, field_label: str = "Date") -> date:
    """Date must be strictly before today."""
    if value >= date.today():
        raise ValueError(f"{field_label} must be in the past")
    return value


def validate_not_future(value: date, field_label: str = "Date") -> date:
    """Date may be today or earlier."""
    if value > date.today():
        raise ValueError(f"{field_label} cannot be in the future")
    return value


def validate_date_order(start: date, end: Optional[date]) -> Optional[date]:
    """End date, when set, must come after start date."""
    if end is not None and end <= start:
        raise ValueError("End date must be after start date")
    return end


def escape_like(term: str, escape_char: str = "\\") -> str:
    """Escape LIKE wildcards so a search term matches literally."""
    return (
        term.replace(escape_char, escape_char * 2)
        .replace("%", f"{escape_char}%")
        .replace("_", f"{escape_char}_")
    )
