# models/validators.py

"""
Form rules shared by several models.
"""

import re
from typing import Iterable, List, Optional

# Same loose rule the web forms apply: something@something, no spaces
EMAIL_PATTERN = re.compile(r"^\S+@\S+$")


def required_text(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{field} is required")
    return str(value).strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = str(value).strip()
    return stripped or None


def valid_email(value: Optional[str]) -> str:
    email = required_text(value, "Email")
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email")
    return email.lower()


def unique_service_types(values: Optional[Iterable]) -> List:
    """Non-empty, order-preserving, duplicates removed."""
    result = []
    for value in values or []:
        if value not in result:
            result.append(value)
    if not result:
        raise ValueError("Select at least one service type")
    return result
