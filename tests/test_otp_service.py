import hashlib

import pytest

from app.core.exceptions import (
    EmailDeliveryFailed,
    InvalidOtp,
    InvalidRequest,
    MissingCredential,
    NoOtpRequested,
    OtpExpired,
    UserNotFound,
)
from app.services.otp_service import OtpManager, OtpState, otp_state
from utils.constants import OTP_VALIDITY_MS
from utils.validation_utils import generate_otp_code

from tests.support import RecordingMailer, START_MS


def wrong_code(code: str) -> str:
    return "100000" if code != "100000" else "100001"


@pytest.mark.asyncio
async def test_request_stores_digest_and_emails_plaintext(manager, store, mailer):
    await manager.request_otp("dealer@example.com")

    code = mailer.last_code()
    saved = store.snapshot()
    entry = saved["otps"]["dealer@example.com"]

    assert entry == {
        "codeHash": hashlib.sha256(code.encode()).hexdigest(),
        "exp": START_MS + OTP_VALIDITY_MS,
    }
    assert f"\"{code}\"" not in store.content
    assert mailer.sent[-1]["to"] == ["dealer@example.com"]
    assert mailer.sent[-1]["subject"] == "Your OTP Code"
    assert saved["logs"][0]["action"] == "OTP_REQUEST"
    assert saved["logs"][0]["user"] == "dealer"
    assert saved["logs"][0]["meta"] == "dealer@example.com"


@pytest.mark.asyncio
async def test_full_lifecycle_then_replay_fails(manager, store, mailer):
    await manager.request_otp("dealer@example.com")
    code = mailer.last_code()

    await manager.reset_password("dealer@example.com", code, "new-hash")

    saved = store.snapshot()
    assert saved["users"][0]["passwordHash"] == "new-hash"
    assert "dealer@example.com" not in saved["otps"]
    assert saved["logs"][0]["action"] == "PASSWORD_RESET"
    assert [log["action"] for log in saved["logs"]] == ["PASSWORD_RESET", "OTP_REQUEST"]

    with pytest.raises(NoOtpRequested):
        await manager.reset_password("dealer@example.com", code, "another-hash")
    assert store.snapshot()["users"][0]["passwordHash"] == "new-hash"


@pytest.mark.asyncio
async def test_expired_otp_is_rejected_and_kept(manager, store, mailer, clock):
    await manager.request_otp("dealer@example.com")
    code = mailer.last_code()
    writes = store.writes

    clock.advance(OTP_VALIDITY_MS + 1)

    with pytest.raises(OtpExpired):
        await manager.reset_password("dealer@example.com", code, "new-hash")

    saved = store.snapshot()
    assert "dealer@example.com" in saved["otps"]
    assert saved["users"][0]["passwordHash"] == "old-hash"
    assert store.writes == writes
    assert otp_state(saved, "dealer@example.com", clock()) == OtpState.EXPIRED


@pytest.mark.asyncio
async def test_otp_valid_exactly_at_expiry(manager, mailer, clock):
    await manager.request_otp("dealer@example.com")
    clock.advance(OTP_VALIDITY_MS)

    await manager.reset_password("dealer@example.com", mailer.last_code(), "new-hash")


@pytest.mark.asyncio
async def test_expired_entry_is_overwritten_by_new_request(manager, store, mailer, clock):
    await manager.request_otp("dealer@example.com")
    clock.advance(OTP_VALIDITY_MS + 1)

    await manager.request_otp("dealer@example.com")
    saved = store.snapshot()

    assert len(saved["otps"]) == 1
    assert saved["otps"]["dealer@example.com"]["exp"] == clock() + OTP_VALIDITY_MS
    await manager.reset_password("dealer@example.com", mailer.last_code(), "new-hash")


@pytest.mark.asyncio
async def test_wrong_code_leaves_state_unchanged(manager, store, mailer):
    await manager.request_otp("dealer@example.com")
    before = store.snapshot()

    with pytest.raises(InvalidOtp):
        await manager.reset_password("dealer@example.com", wrong_code(mailer.last_code()), "new-hash")

    assert store.snapshot() == before


@pytest.mark.asyncio
async def test_unknown_user_no_mutation_no_email(manager, store, mailer):
    before = store.content

    with pytest.raises(UserNotFound):
        await manager.request_otp("nobody@example.com")

    assert store.content == before
    assert store.writes == 0
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_email_matching_is_case_insensitive(manager, store, mailer):
    await manager.request_otp("  DEALER@example.COM ")
    assert list(store.snapshot()["otps"]) == ["dealer@example.com"]
    assert mailer.sent[-1]["to"] == ["dealer@example.com"]

    await manager.reset_password("Dealer@Example.com", mailer.last_code(), "new-hash")
    assert store.snapshot()["users"][0]["passwordHash"] == "new-hash"


@pytest.mark.asyncio
async def test_numeric_otp_is_accepted(store, mailer, clock):
    manager = OtpManager(store, mailer, clock=clock, code_factory=lambda: "654321")
    await manager.request_otp("admin@example.com")

    await manager.reset_password("admin@example.com", 654321, "fresh")
    assert store.snapshot()["users"][1]["passwordHash"] == "fresh"


@pytest.mark.asyncio
async def test_second_request_overwrites_first_code(store, mailer, clock):
    codes = iter(["111111", "222222"])
    manager = OtpManager(store, mailer, clock=clock, code_factory=lambda: next(codes))

    await manager.request_otp("dealer@example.com")
    await manager.request_otp("dealer@example.com")

    with pytest.raises(InvalidOtp):
        await manager.reset_password("dealer@example.com", "111111", "x")
    await manager.reset_password("dealer@example.com", "222222", "x")


@pytest.mark.asyncio
async def test_missing_mail_credential_fails_before_mutation(store, clock):
    manager = OtpManager(store, RecordingMailer(configured=False), clock=clock)

    with pytest.raises(MissingCredential):
        await manager.request_otp("dealer@example.com")
    assert store.writes == 0


@pytest.mark.asyncio
async def test_delivery_failure_keeps_usable_otp(store, clock):
    manager = OtpManager(store, RecordingMailer(fail=True), clock=clock, code_factory=lambda: "424242")

    with pytest.raises(EmailDeliveryFailed):
        await manager.request_otp("dealer@example.com")

    assert "dealer@example.com" in store.snapshot()["otps"]
    await manager.reset_password("dealer@example.com", "424242", "new-hash")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email, otp, new_hash, message",
    [
        (None, "123456", "h", "Email required"),
        ("   ", "123456", "h", "Email required"),
        ("dealer@example.com", None, "h", "OTP required"),
        ("dealer@example.com", "", "h", "OTP required"),
        ("dealer@example.com", 0, "h", "OTP required"),
        ("dealer@example.com", "123456", None, "newPasswordHash required"),
    ],
)
async def test_reset_requires_all_fields(manager, store, email, otp, new_hash, message):
    with pytest.raises(InvalidRequest) as exc_info:
        await manager.reset_password(email, otp, new_hash)
    assert exc_info.value.message == message
    assert exc_info.value.status_code == 400
    assert store.writes == 0


@pytest.mark.asyncio
async def test_request_requires_email(manager):
    with pytest.raises(InvalidRequest):
        await manager.request_otp("")


@pytest.mark.asyncio
async def test_reset_without_request(manager):
    with pytest.raises(NoOtpRequested):
        await manager.reset_password("dealer@example.com", "123456", "h")


@pytest.mark.asyncio
async def test_user_removed_after_issue(manager, store, mailer):
    await manager.request_otp("dealer@example.com")
    code = mailer.last_code()

    async with store.edit() as document:
        document["users"] = [u for u in document["users"] if u["username"] != "dealer"]

    with pytest.raises(UserNotFound):
        await manager.reset_password("dealer@example.com", code, "new-hash")
    assert "dealer@example.com" in store.snapshot()["otps"]


def test_otp_state_classification():
    document = {"otps": {"a@x.io": {"codeHash": "h", "exp": 1000}}}
    assert otp_state(document, "b@x.io", 500) == OtpState.NO_OTP
    assert otp_state(document, "A@X.io", 500) == OtpState.PENDING
    assert otp_state(document, "a@x.io", 1001) == OtpState.EXPIRED
    assert otp_state({"otps": None}, "a@x.io", 0) == OtpState.NO_OTP


def test_generated_codes_are_six_digits():
    for _ in range(500):
        code = generate_otp_code()
        assert len(code) == 6
        assert 100000 <= int(code) <= 999999
