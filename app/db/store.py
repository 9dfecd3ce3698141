"""
app/db/store.py

Purpose: Document store abstraction

- DocumentStore: fetch/replace of the single application document
- Read-modify-write helper serialized per process with an asyncio.Lock
- In-memory implementation for tests and local development

The remote store has no version check, so two processes editing at the
same time still race: the later write replaces the whole document.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from app.core.exceptions import MalformedPayload
from app.core.logging import get_logger
from app.db.schema import Document, normalize

logger = get_logger(__name__)


class DocumentStore(ABC):
    """
    Operations the API needs from the persistence layer.
    """

    def __init__(self):
        self._lock = asyncio.Lock()

    @abstractmethod
    async def fetch_document(self) -> Document:
        """Return the current document, normalized."""

    @abstractmethod
    async def replace_document(self, document: Document) -> None:
        """Overwrite the stored document with `document`."""

    async def ping(self) -> bool:
        """True when the backing store is reachable. Never raises."""
        return True

    async def close(self) -> None:
        return None

    @asynccontextmanager
    async def edit(self) -> AsyncIterator[Document]:
        """
        Fetch, normalize, yield for mutation, then write back.

        The write is skipped when the block raises. Edits within this
        process run one at a time.
        """
        async with self._lock:
            document = await self.fetch_document()
            yield document
            await self.replace_document(document)

    async def overwrite(self, document: Any) -> Document:
        """
        Normalize and store a complete document supplied by a client.
        """
        normalized = normalize(document)
        async with self._lock:
            await self.replace_document(normalized)
        return normalized


class InMemoryDocumentStore(DocumentStore):
    """Keeps the serialized document in process memory."""

    def __init__(self, initial: Optional[Any] = None):
        super().__init__()
        self.content: Optional[str] = None
        self.writes = 0
        if initial is not None:
            self.content = json.dumps(initial, indent=2, ensure_ascii=False)

    async def fetch_document(self) -> Document:
        if self.content is None:
            return normalize({})
        try:
            raw = json.loads(self.content or "{}")
        except ValueError as e:
            raise MalformedPayload() from e
        if not isinstance(raw, dict):
            raise MalformedPayload()
        return normalize(raw)

    async def replace_document(self, document: Document) -> None:
        self.content = json.dumps(document, indent=2, ensure_ascii=False)
        self.writes += 1
        logger.debug(f"In-memory document replaced (write #{self.writes})")

    def snapshot(self) -> Optional[Document]:
        """The stored document as last written, without normalization."""
        if self.content is None:
            return None
        return json.loads(self.content)
