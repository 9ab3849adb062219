"""
Field validation rules for the verification form.

Each rule is a full-match regular expression plus the message shown next to the
field. `check()` returns the message for a failing value and "" otherwise, so a
step can build its error set in one pass.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional

from idverify.settings import settings


@dataclass(frozen=True)
class FieldRule:
    pattern: re.Pattern
    message: str


RULES: Dict[str, FieldRule] = {
    "identityNumber": FieldRule(
        re.compile(r"[0-9]{12}"),
        "Identity number must be exactly 12 digits",
    ),
    "mobileNumber": FieldRule(
        re.compile(r"[6-9][0-9]{9}"),
        "Mobile number must start with 6-9 and be 10 digits",
    ),
    "taxId": FieldRule(
        re.compile(r"[A-Z]{5}[0-9]{4}[A-Z]"),
        "Tax ID format: 5 letters, 4 digits, 1 letter (e.g., ABCDE1234F)",
    ),
    "otp": FieldRule(
        re.compile(r"[0-9]{6}"),
        "OTP must be exactly 6 digits",
    ),
}

NAME_MESSAGE = "Name must be at least 2 characters long"
DOB_MESSAGE = "Date of birth is required"

# Input-time constraints (what a browser input would enforce)
DIGITS_ONLY_FIELDS = {"identityNumber", "mobileNumber"}
UPPERCASE_FIELDS = {"taxId"}
MAX_LENGTHS: Dict[str, int] = {
    "identityNumber": 12,
    "mobileNumber": 10,
    "otp": 6,
    "taxId": 10,
    "fullName": 100,
}

# ASCII only: \d and str.isdigit() both accept other Unicode digits
_DIGITS_RE = re.compile(r"[0-9]*")


def check(name: str, value: Optional[str]) -> str:
    rule = RULES.get(name)
    if rule is None:
        return ""
    if not rule.pattern.fullmatch(value or ""):
        return rule.message
    return ""


def is_valid_identity_number(value: Optional[str]) -> bool:
    return not check("identityNumber", value)


def is_valid_mobile_number(value: Optional[str]) -> bool:
    return not check("mobileNumber", value)


def is_valid_tax_id(value: Optional[str]) -> bool:
    return not check("taxId", value)


def is_valid_otp(value: Optional[str]) -> bool:
    return not check("otp", value)


def check_full_name(value: Optional[str]) -> str:
    if not value or len(value.strip()) < 2:
        return NAME_MESSAGE
    return ""


def check_date_of_birth(value: Optional[str]) -> str:
    return "" if value else DOB_MESSAGE


def is_digits(value: str) -> bool:
    return _DIGITS_RE.fullmatch(value) is not None


def sanitize_input(name: str, value: Optional[str]) -> Optional[str]:
    """
    Apply input-time rules to a raw edit.

    Returns the value to store, or None when the edit must be rejected
    (non-digit characters in a digits-only field). Over-long values are cut to
    the field's maximum length; tax identifiers are upper-cased as typed.
    """
    value = value or ""
    if name in DIGITS_ONLY_FIELDS and not is_digits(value):
        return None
    if name in UPPERCASE_FIELDS:
        value = value.upper()
    limit = MAX_LENGTHS.get(name)
    if limit is not None:
        value = value[:limit]
    return value


def invalid_otp_message() -> str:
    return f"Invalid OTP. Use {settings.DEMO_OTP} for demo."
