"""
app/services/document_service.py

Purpose: Whole-document operations

- Load the normalized document for the client
- Replace it with a client-supplied document
- Health report: credential presence and store reachability
"""

from typing import Any, Dict, Optional

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.db.schema import Document
from app.db.store import DocumentStore

logger = get_logger(__name__)


async def load_document(store: DocumentStore) -> Document:
    document = await store.fetch_document()
    logger.debug("Document loaded")
    return document


async def save_document(store: DocumentStore, payload: Any) -> Document:
    """
    Normalizes and stores a complete document.

    Raises:
        ValidationError: payload is missing or not a JSON object
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid payload")
    document = await store.overwrite(payload)
    logger.info("Document replaced by client")
    return document


async def health_report(store: Optional[DocumentStore], config: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Reports which credentials are set and whether the gist is reachable.

    Never raises; any failure shows up as gist_ok=False. `store` is None
    when the store credentials are missing.
    """
    config = config or default_settings
    report = {
        "env": {
            "GIST_ID": bool(config.GIST_ID),
            "GITHUB_TOKEN": bool(config.GITHUB_TOKEN),
            "GIST_FILE": config.GIST_FILE,
            "RESEND_API_KEY": "set" if config.RESEND_API_KEY else "missing",
        },
        "gist_ok": False,
    }

    if store is None:
        return report

    try:
        report["gist_ok"] = await store.ping()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        report["gist_ok"] = False

    return report
