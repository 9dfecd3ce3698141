"""
app/services/otp_service.py

Purpose: OTP issuance and password reset

- Issues 6-digit codes, stores only their SHA-256 digest with an expiry
- Verifies codes in constant time, single use
- Applies the new password hash and clears the OTP entry
- Records OTP_REQUEST / PASSWORD_RESET in the activity log

Per-email states (held in document["otps"]):
    NO_OTP  --request-->  PENDING  --reset ok-->  NO_OTP (entry deleted)
    PENDING --time passes-->  EXPIRED  (kept until overwritten by a request)

Expiry is checked lazily on reset; nothing sweeps old entries.
"""

from enum import Enum
from typing import Any, Callable, Dict, Optional

from app.core.exceptions import (
    InvalidOtp,
    InvalidRequest,
    MissingCredential,
    NoOtpRequested,
    OtpExpired,
    UserNotFound,
)
from app.core.logging import get_logger, LogContext
from app.db.schema import Document, append_log, find_user, find_user_index, otp_entries
from app.db.store import DocumentStore
from app.services.email_service import EmailService
from utils.constants import (
    LOG_OTP_REQUEST,
    LOG_PASSWORD_RESET,
    OTP_EMAIL_HTML,
    OTP_EMAIL_SUBJECT,
    OTP_VALIDITY_MINUTES,
)
from utils.time_utils import calculate_otp_expiry, is_otp_expired, now_ms
from utils.validation_utils import generate_otp_code, hash_otp, normalize_email, otp_matches

logger = get_logger(__name__)


class OtpState(str, Enum):
    """
    Observable state of the OTP entry for one email.
    """
    NO_OTP = "NO_OTP"
    PENDING = "PENDING"
    EXPIRED = "EXPIRED"


def otp_state(document: Document, email: str, now: Optional[int] = None) -> OtpState:
    """
    Classifies the OTP entry stored for `email` (normalized here).
    """
    otps = document.get("otps")
    entry = otps.get(normalize_email(email)) if isinstance(otps, dict) else None
    if not isinstance(entry, dict):
        return OtpState.NO_OTP
    if is_otp_expired(entry.get("exp"), now):
        return OtpState.EXPIRED
    return OtpState.PENDING


def render_otp_email(code: str) -> str:
    return OTP_EMAIL_HTML.format(code=code, validity_minutes=OTP_VALIDITY_MINUTES)


class OtpManager:
    """
    OTP request/reset on top of a document store and an email service.
    """

    def __init__(
        self,
        store: DocumentStore,
        mailer: EmailService,
        clock: Callable[[], int] = now_ms,
        code_factory: Callable[[], str] = generate_otp_code,
    ):
        self.store = store
        self.mailer = mailer
        self.clock = clock
        self.code_factory = code_factory

    async def request_otp(self, email: Any) -> Dict[str, Any]:
        """
        Issues a new OTP for a known user and emails it.

        Any earlier entry for the email is overwritten. The entry is
        persisted before sending, so a delivery failure leaves a usable
        code behind.

        Raises:
            MissingCredential: email delivery is not configured
            InvalidRequest: email missing
            UserNotFound: no user with this email
            UpstreamUnavailable / MalformedPayload: store failure
            EmailDeliveryFailed: the send failed after persisting
        """
        if not self.mailer.is_configured():
            raise MissingCredential()

        target = normalize_email(email)
        if not target:
            raise InvalidRequest("Email required")

        code = self.code_factory()

        with LogContext(email=target, action=LOG_OTP_REQUEST):
            async with self.store.edit() as document:
                user = find_user(document, target)
                if user is None:
                    logger.info("OTP requested for unknown email")
                    raise UserNotFound()

                issued = self.clock()
                otp_entries(document)[target] = {
                    "codeHash": hash_otp(code),
                    "exp": calculate_otp_expiry(issued),
                }
                append_log(document, user.get("username") or target, LOG_OTP_REQUEST, target)

            logger.info("OTP stored, sending email")
            await self.mailer.send_email(
                to=[target],
                subject=OTP_EMAIL_SUBJECT,
                html=render_otp_email(code),
            )

        return {"ok": True}

    async def reset_password(self, email: Any, otp: Any, new_password_hash: Any) -> Dict[str, Any]:
        """
        Verifies an OTP and replaces the user's password hash.

        Raises:
            InvalidRequest: email, otp or new_password_hash missing
            NoOtpRequested: no entry for the email (never requested, or consumed)
            OtpExpired: entry past its expiry (left in place)
            InvalidOtp: digest mismatch (entry and password untouched)
            UserNotFound: user removed since the OTP was issued
        """
        target = normalize_email(email)
        if not target:
            raise InvalidRequest("Email required")
        if otp is None or otp == "" or otp == 0:
            raise InvalidRequest("OTP required")
        if not new_password_hash:
            raise InvalidRequest("newPasswordHash required")

        with LogContext(email=target, action=LOG_PASSWORD_RESET):
            async with self.store.edit() as document:
                otps = otp_entries(document)
                entry = otps.get(target)
                if not isinstance(entry, dict):
                    raise NoOtpRequested()
                if is_otp_expired(entry.get("exp"), self.clock()):
                    logger.info("Expired OTP rejected")
                    raise OtpExpired()
                if not otp_matches(otp, entry.get("codeHash")):
                    logger.info("Wrong OTP rejected")
                    raise InvalidOtp()

                index = find_user_index(document, target)
                if index == -1:
                    raise UserNotFound()
                user = document["users"][index]
                user["passwordHash"] = new_password_hash

                del otps[target]
                append_log(document, user.get("username") or target, LOG_PASSWORD_RESET, target)

            logger.info("Password reset")

        return {"ok": True}
