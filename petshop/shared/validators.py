"""Shared validation utilities"""

import re
from datetime import datetime, time
from typing import Optional

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
EMAIL_PATTERN = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$")


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a phone number to digits only.

    Accepts 10 or 11 digit numbers (area code + number), with an optional
    leading country code 55.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    # Remove all non-digit characters
    digits = re.sub(r"\D", "", phone)

    if digits.startswith("55") and len(digits) in (12, 13):
        digits = digits[2:]

    if len(digits) not in (10, 11):
        raise ValueError("Phone number must have 10 or 11 digits including area code")

    return digits


def validate_email(email: Optional[str]) -> Optional[str]:
    """Lowercase an email address; blank values become None"""
    if not email or not email.strip():
        return None

    normalized = email.strip().lower()
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError(f"Invalid email address: {email}")

    return normalized


def parse_hhmm(value: str) -> time:
    """Parse a 24h "HH:MM" string"""
    match = HHMM_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid time '{value}'. Expected HH:MM")
    return time(int(match.group(1)), int(match.group(2)))


def to_local_naive(value: datetime) -> datetime:
    """
    Convert a timestamp to the host's local wall-clock time without tzinfo.

    Naive values are assumed to already be local.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
