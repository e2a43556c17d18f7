"""
Field validators
Pure predicates used before any identity-provider or store call
"""

import re
from typing import Any

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_TIME_RE = re.compile(r"[0-9]{2}:[0-9]{2}")

MIN_PASSWORD_LENGTH = 6


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(_EMAIL_RE.fullmatch(value))


def is_non_empty(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def is_valid_password(value: Any) -> bool:
    return isinstance(value, str) and len(value) >= MIN_PASSWORD_LENGTH


def is_valid_date(value: Any) -> bool:
    """YYYY-MM-DD with numeric groups (shape only, not calendar validity)"""
    return isinstance(value, str) and bool(_DATE_RE.fullmatch(value))


def is_valid_time(value: Any) -> bool:
    """Empty, or HH:MM with numeric groups"""
    if not isinstance(value, str):
        return False
    return value == "" or bool(_TIME_RE.fullmatch(value))
