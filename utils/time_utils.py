"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Epoch-millisecond clock used for OTP expiry
- OTP expiry checks
- Log timestamps
"""

import time
from datetime import datetime, timezone
from typing import Optional

from utils.constants import OTP_VALIDITY_MS


def now_ms() -> int:
    """
    Current time as integer epoch milliseconds.
    """
    return int(time.time() * 1000)


def calculate_otp_expiry(issued_ms: int, validity_ms: int = OTP_VALIDITY_MS) -> int:
    """
    Calculates OTP expiry as epoch milliseconds.
    """
    return issued_ms + validity_ms


def is_otp_expired(exp_ms, now: Optional[int] = None) -> bool:
    """
    Checks if an OTP has expired.

    A stored expiry that is not a number counts as expired.
    """
    if now is None:
        now = now_ms()
    try:
        return now > float(exp_ms)
    except (TypeError, ValueError):
        return True


def iso_timestamp(dt: Optional[datetime] = None) -> str:
    """
    UTC ISO-8601 timestamp with millisecond precision and a Z suffix.
    """
    if dt is None:
        dt = datetime.now(timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
