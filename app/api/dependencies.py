"""
app/api/dependencies.py

Purpose: FastAPI dependency providers

- Document store singleton (Gist, or in-memory when USE_IN_MEMORY_STORE)
- Email service and OTP manager wiring
- Store shutdown hook for the application lifespan
"""

from typing import Optional

from fastapi import Depends

from app.core.config import settings
from app.core.exceptions import MisconfiguredError
from app.core.logging import get_logger
from app.db.gist import GistDocumentStore
from app.db.store import DocumentStore, InMemoryDocumentStore
from app.services.email_service import EmailService
from app.services.otp_service import OtpManager

logger = get_logger(__name__)

_document_store: Optional[DocumentStore] = None
_email_service: Optional[EmailService] = None


def get_optional_document_store() -> Optional[DocumentStore]:
    """
    Return the singleton store, or None when the gist is not configured.
    """
    global _document_store
    if _document_store is not None:
        return _document_store

    if settings.USE_IN_MEMORY_STORE:
        logger.warning("Using in-memory document store")
        _document_store = InMemoryDocumentStore()
    elif settings.store_configured:
        _document_store = GistDocumentStore(
            gist_id=settings.GIST_ID,
            token=settings.GITHUB_TOKEN,
            file_name=settings.GIST_FILE,
            api_url=settings.GITHUB_API_URL,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
    return _document_store


def get_document_store(
    store: Optional[DocumentStore] = Depends(get_optional_document_store),
) -> DocumentStore:
    """
    Raises:
        MisconfiguredError: GIST_ID or GITHUB_TOKEN missing
    """
    if store is None:
        raise MisconfiguredError()
    return store


def get_email_service() -> EmailService:
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service


def get_otp_manager(
    store: DocumentStore = Depends(get_document_store),
    mailer: EmailService = Depends(get_email_service),
) -> OtpManager:
    return OtpManager(store=store, mailer=mailer)


async def close_document_store():
    """Close the store's HTTP client (application shutdown)."""
    global _document_store
    if _document_store is not None:
        await _document_store.close()
        _document_store = None
