import re
from typing import Optional

from email_validator import EmailNotValidError, validate_email

PHONE_PATTERN = re.compile(r"^[0-9]{10,11}$")


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_PATTERN.fullmatch(phone))


def missing(*values: Optional[str]) -> bool:
    """True if any value is None or blank."""
    return any(value is None or not str(value).strip() for value in values)


def has_forbidden_characters(password: str) -> bool:
    """bcrypt cannot hash a NUL byte."""
    return "\x00" in password
