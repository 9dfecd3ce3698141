import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_email_service, get_optional_document_store
from app.db.store import InMemoryDocumentStore
from app.main import app
from app.services.otp_service import OtpManager

from tests.support import FakeClock, RecordingMailer, seed_document


@pytest.fixture
def store():
    return InMemoryDocumentStore(seed_document())


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def manager(store, mailer, clock):
    return OtpManager(store=store, mailer=mailer, clock=clock)


@pytest.fixture
def client(store, mailer):
    app.dependency_overrides[get_optional_document_store] = lambda: store
    app.dependency_overrides[get_email_service] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()
