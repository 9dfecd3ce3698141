"""
utils/constants.py

Purpose: Centralized static values

- Canonical document defaults
- OTP parameters and log action names
- Outgoing email content

(Prevents hardcoding across the codebase)
"""

# ============================================================
# DOCUMENT SCHEMA
# ============================================================

DOCUMENT_BASELINE_VERSION = 5.1

DEFAULT_DEALER_NAMES = {
    "t1": "Dealer T1",
    "t2": "Dealer T2",
    "t3": "Dealer T3",
}

# Newest first; the oldest entry is dropped beyond this
LOG_LIMIT = 3000


# ============================================================
# OTP
# ============================================================

OTP_MIN = 100000
OTP_MAX = 999999
OTP_VALIDITY_MINUTES = 10
OTP_VALIDITY_MS = OTP_VALIDITY_MINUTES * 60 * 1000

ACTION_REQUEST = "request"
ACTION_RESET = "reset"

LOG_OTP_REQUEST = "OTP_REQUEST"
LOG_PASSWORD_RESET = "PASSWORD_RESET"


# ============================================================
# EMAIL
# ============================================================

OTP_EMAIL_SUBJECT = "Your OTP Code"

OTP_EMAIL_HTML = """
<div style="font-family:system-ui,Segoe UI,Roboto,Helvetica,Arial,sans-serif;font-size:14px;color:#111">
  <h2 style="margin:0 0 8px">Your ProPricing OTP</h2>
  <p>Use this 6-digit code to reset your password. It expires in {validity_minutes} minutes.</p>
  <div style="font-size:28px;font-weight:700;letter-spacing:6px;margin:12px 0">{code}</div>
  <p style="color:#666">If you didn't request this, you can ignore this email.</p>
</div>"""
