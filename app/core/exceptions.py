from typing import Optional, Any


class ProPricingError(Exception):
    """
    Base exception for the ProPricing backend.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(ProPricingError):
    """
    Raised when request fields are malformed or missing.
    """
    def __init__(self, message: str = "Invalid payload", code: str = "VALIDATION_ERROR", details: Optional[Any] = None):
        super().__init__(message, code=code, status_code=400, details=details)


class InvalidRequest(ValidationError):
    def __init__(self, message: str = "Invalid request", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_REQUEST", details=details)


class UnsupportedAction(ValidationError):
    def __init__(self, message: str = "Unsupported action", details: Optional[Any] = None):
        super().__init__(message, code="UNSUPPORTED_ACTION", details=details)


class NoOtpRequested(ValidationError):
    """
    Raised on reset when no OTP entry exists for the email.
    """
    def __init__(self, message: str = "No OTP requested", details: Optional[Any] = None):
        super().__init__(message, code="NO_OTP_REQUESTED", details=details)


class OtpExpired(ValidationError):
    def __init__(self, message: str = "OTP expired", details: Optional[Any] = None):
        super().__init__(message, code="OTP_EXPIRED", details=details)


class InvalidOtp(ValidationError):
    def __init__(self, message: str = "Invalid OTP", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_OTP", details=details)


class NotFound(ProPricingError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", code: str = "NOT_FOUND", details: Optional[Any] = None):
        super().__init__(message, code=code, status_code=404, details=details)


class UserNotFound(NotFound):
    def __init__(self, message: str = "User not found", details: Optional[Any] = None):
        super().__init__(message, code="USER_NOT_FOUND", details=details)


class MisconfiguredError(ProPricingError):
    """
    Raised when a required credential is not configured.
    """
    def __init__(self, message: str = "Missing GIST_ID or GITHUB_TOKEN", code: str = "MISCONFIGURED", details: Optional[Any] = None):
        super().__init__(message, code=code, status_code=500, details=details)


class MissingCredential(MisconfiguredError):
    def __init__(self, message: str = "Missing RESEND_API_KEY", details: Optional[Any] = None):
        super().__init__(message, code="MISSING_CREDENTIAL", details=details)


class UpstreamUnavailable(ProPricingError):
    """
    Raised when the Gist store (or mail API) answers with a non-success
    status or cannot be reached. Carries the upstream status and body.
    """
    def __init__(
        self,
        message: str = "Upstream service unavailable",
        status: Optional[int] = None,
        body: str = "",
        code: str = "UPSTREAM_UNAVAILABLE",
    ):
        self.status = status
        self.body = body
        super().__init__(message, code=code, status_code=500, details={"status": status, "body": body})


class EmailDeliveryFailed(UpstreamUnavailable):
    def __init__(self, message: str = "Email delivery failed", status: Optional[int] = None, body: str = ""):
        super().__init__(message, status=status, body=body, code="EMAIL_DELIVERY_FAILED")


class MalformedPayload(ProPricingError):
    """
    Raised when the stored document is not a JSON object.
    """
    def __init__(self, message: str = "Invalid JSON in Gist file", details: Optional[Any] = None):
        super().__init__(message, code="MALFORMED_PAYLOAD", status_code=500, details=details)


class MethodNotAllowed(ProPricingError):
    def __init__(self, message: str = "Method Not Allowed", details: Optional[Any] = None):
        super().__init__(message, code="METHOD_NOT_ALLOWED", status_code=405, details=details)
