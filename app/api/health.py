"""
app/api/health.py

Purpose: Deployment diagnostics

- Reports which credentials are configured
- Checks the gist is reachable
- Always answers 200
"""

from typing import Optional

from fastapi import APIRouter, Depends

from app.api.dependencies import get_optional_document_store
from app.db.store import DocumentStore
from app.schemas.response import HealthResponse
from app.services.document_service import health_report

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(store: Optional[DocumentStore] = Depends(get_optional_document_store)):
    return await health_report(store)
