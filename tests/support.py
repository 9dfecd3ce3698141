import re

from app.core.exceptions import EmailDeliveryFailed, MissingCredential
from app.services.email_service import EmailService

CODE_PATTERN = re.compile(r">(\d{6})</div>")

START_MS = 1_700_000_000_000


class RecordingMailer(EmailService):
    """EmailService that records messages instead of calling Resend."""

    def __init__(self, configured: bool = True, fail: bool = False):
        super().__init__(api_key="re_test_key" if configured else "", sender="ProPricing <noreply@proplugin.com>")
        self.fail = fail
        self.sent = []

    async def send_email(self, to, subject, html):
        if not self.is_configured():
            raise MissingCredential()
        if self.fail:
            raise EmailDeliveryFailed("Email delivery failed: 500 boom", status=500, body="boom")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return {"id": f"email_{len(self.sent)}"}

    def last_code(self) -> str:
        match = CODE_PATTERN.search(self.sent[-1]["html"])
        assert match, "no code in email body"
        return match.group(1)


class FakeClock:
    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


def seed_document():
    return {
        "version": 5.1,
        "users": [
            {"email": "Dealer@Example.com", "username": "dealer", "passwordHash": "old-hash"},
            {"email": "admin@example.com", "username": "admin", "passwordHash": "admin-hash"},
        ],
        "products": [{"sku": "P-1"}],
    }
