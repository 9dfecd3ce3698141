"""
app/api/data.py

Purpose: Whole-document endpoints

- GET  /data: normalized application document
- POST /save: replace the document with the request body
"""

from fastapi import APIRouter, Depends, Request

from app.api.dependencies import get_document_store
from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.db.store import DocumentStore
from app.schemas.response import OkResponse
from app.services.document_service import load_document, save_document

logger = get_logger(__name__)
router = APIRouter()


@router.get("/data")
async def get_data(store: DocumentStore = Depends(get_document_store)):
    """
    Returns the stored document, upgraded to the current schema.
    """
    return await load_document(store)


@router.post("/save", response_model=OkResponse)
async def save_data(request: Request, store: DocumentStore = Depends(get_document_store)):
    """
    Replaces the stored document. The body must be a JSON object.
    """
    try:
        payload = await request.json()
    except ValueError as e:
        logger.info(f"Rejected non-JSON save payload: {e}")
        raise ValidationError("Invalid payload") from e

    await save_document(store, payload)
    return OkResponse()
