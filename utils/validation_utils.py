"""
utils/validation_utils.py

Purpose: Input validation

- Email normalization (the identity key for users and OTP entries)
- OTP generation and digest
"""

import hashlib
import hmac
import secrets
from typing import Any, Optional

from utils.constants import OTP_MIN, OTP_MAX


def normalize_email(email: Any) -> str:
    """
    Normalizes an email for lookup: stringified, trimmed, lowercased.

    Args:
        email: Raw value from a request body (may be None)

    Returns:
        Lowercased email, or "" when nothing usable was given
    """
    if email is None:
        return ""
    return str(email).strip().lower()


def email_key(value: Any) -> Optional[str]:
    """
    Lowercased form of a stored email field.

    Returns None for non-string values so they never match a lookup.
    """
    if not isinstance(value, str):
        return None
    return value.lower()


def generate_otp_code() -> str:
    """
    Draws a uniformly random 6-digit code from [100000, 999999].
    """
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def hash_otp(code: Any) -> str:
    """
    SHA-256 hex digest (lowercase) of the code's string form.
    """
    return hashlib.sha256(str(code).encode("utf-8")).hexdigest()


def otp_matches(code: Any, code_hash: Any) -> bool:
    """
    Constant-time comparison of a submitted code against a stored digest.
    """
    if not isinstance(code_hash, str):
        return False
    return hmac.compare_digest(hash_otp(code).encode("ascii"), code_hash.encode("utf-8"))
