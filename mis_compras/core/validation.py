"""
Field validation rules.

Predicates shared by the request schemas (through pydantic validators) and
the services. Optional contact fields such as phone and tax id accept empty
values; presence is enforced by the schema, not here.
"""

from __future__ import annotations

import re
from typing import Any, Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-+()]{7,15}$")
TAX_ID_PATTERN = re.compile(r"^\d{9,12}(-\d)?$")
CODE_PATTERN = re.compile(r"^[A-Z0-9-]+$")

MIN_PASSWORD_LENGTH = 8
MIN_TITLE_LENGTH = 5
MAX_TITLE_LENGTH = 200


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value.strip()) is not None


def is_valid_password(value: Optional[str]) -> bool:
    return value is not None and len(value) >= MIN_PASSWORD_LENGTH


def is_valid_phone(value: Optional[str]) -> bool:
    if is_blank(value):
        return True
    return PHONE_PATTERN.match(value.strip()) is not None


def is_valid_tax_id(value: Optional[str]) -> bool:
    """Colombian NIT: 9 to 12 digits with an optional ``-N`` check digit; dots are ignored."""
    if is_blank(value):
        return True
    return TAX_ID_PATTERN.match(value.strip().replace(".", "")) is not None


def is_valid_title(value: Optional[str]) -> bool:
    if value is None:
        return False
    return MIN_TITLE_LENGTH <= len(value.strip()) <= MAX_TITLE_LENGTH


def is_valid_code(value: Optional[str]) -> bool:
    return bool(value) and CODE_PATTERN.match(value) is not None


def is_positive_number(value: Any) -> bool:
    try:
        return float(value) > 0
    except (TypeError, ValueError):
        return False


def normalize_tax_id(value: Optional[str]) -> Optional[str]:
    if is_blank(value):
        return None
    return value.strip().replace(".", "")
