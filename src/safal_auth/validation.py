"""
Field validation. Pure functions returning an error message or None;
flows call them before any network request.
"""

import re
from dataclasses import dataclass, fields
from typing import Optional

EMAIL_PATTERN = re.compile(r"[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,64}")
OTP_PATTERN = re.compile(r"[0-9]{6}")
OTP_LENGTH = 6
LOGIN_PASSWORD_MIN = 6
NEW_PASSWORD_MIN = 8
PHONE_MIN_DIGITS = 10


@dataclass
class FieldErrors:
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    phone_number: Optional[str] = None
    otp: Optional[str] = None

    @property
    def has_errors(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))

    def clear(self) -> None:
        for f in fields(self):
            setattr(self, f.name, None)


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.fullmatch(value) is not None


def validate_email(value: str) -> Optional[str]:
    trimmed = value.strip()
    if not trimmed:
        return "Email is required"
    if trimmed != value:
        return "Email cannot contain leading or trailing spaces"
    if not is_valid_email(trimmed):
        return "Please enter a valid email"
    return None


def validate_login_password(value: str) -> Optional[str]:
    trimmed = value.strip()
    if not trimmed:
        return "Password is required"
    if trimmed != value:
        return "Password cannot contain spaces"
    if len(value) < LOGIN_PASSWORD_MIN:
        return f"Password must be at least {LOGIN_PASSWORD_MIN} characters"
    return None


def validate_new_password(password: str, confirm: str) -> tuple[Optional[str], Optional[str]]:
    """Returns (password_error, confirm_error); at most one is set."""
    if not password:
        return "New password is required", None
    if len(password) < NEW_PASSWORD_MIN:
        return f"Password must be at least {NEW_PASSWORD_MIN} characters", None
    if not confirm:
        return None, "Please confirm your password"
    if password != confirm:
        return None, "Passwords do not match"
    return None, None


def validate_otp(code: str) -> Optional[str]:
    if not code:
        return "Please enter the verification code"
    if OTP_PATTERN.fullmatch(code) is None:
        return f"Please enter a valid {OTP_LENGTH}-digit verification code"
    return None


def validate_phone_number(value: str) -> Optional[str]:
    if not value:
        return "Phone number is required for verification"
    if len(re.sub(r"\D", "", value)) < PHONE_MIN_DIGITS:
        return "Please enter a valid phone number"
    return None
