"""
app/db/gist.py

Purpose: GitHub Gist as the document store

- Reads the gist metadata and extracts the named JSON file
- Follows raw_url when GitHub reports the file as truncated
- Missing file = first run, served as an empty canonical document
- Writes the whole document back with a PATCH touching only that file
"""

import json
from typing import Any, Dict, Optional

import httpx

from app.core.exceptions import MalformedPayload, UpstreamUnavailable
from app.core.logging import get_logger
from app.db.schema import Document, normalize
from app.db.store import DocumentStore

logger = get_logger(__name__)

GITHUB_ACCEPT = "application/vnd.github+json"

# Upstream bodies are logged, not stored; keep log lines short
LOGGED_BODY_LIMIT = 500


class GistDocumentStore(DocumentStore):
    """
    Document store backed by a single file inside a GitHub Gist.
    """

    def __init__(
        self,
        gist_id: str,
        token: str,
        file_name: str,
        api_url: str = "https://api.github.com",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self.gist_id = gist_id
        self.file_name = file_name
        self.gist_url = f"{api_url.rstrip('/')}/gists/{gist_id}"
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": GITHUB_ACCEPT,
        }

    async def _request(self, method: str, url: str, failure: str, **kwargs) -> httpx.Response:
        """
        Sends a request; any non-2xx status or transport error becomes
        UpstreamUnavailable carrying the status and body text.
        """
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"{failure}: timeout", extra={"gist_file": self.file_name})
            raise UpstreamUnavailable(f"{failure}: timeout") from e
        except httpx.RequestError as e:
            logger.error(f"{failure}: {e}", extra={"gist_file": self.file_name})
            raise UpstreamUnavailable(f"{failure}: {e}") from e

        if not response.is_success:
            body = response.text
            logger.error(
                f"{failure}: {response.status_code} - {body[:LOGGED_BODY_LIMIT]}",
                extra={"gist_file": self.file_name}
            )
            raise UpstreamUnavailable(
                f"{failure}: {response.status_code} {body}",
                status=response.status_code,
                body=body,
            )
        return response

    async def _fetch_gist(self) -> Dict[str, Any]:
        response = await self._request(
            "GET", self.gist_url, "GitHub Gist fetch failed", headers=self._headers
        )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailable(
                "GitHub Gist fetch failed: unreadable response",
                status=response.status_code,
                body=response.text,
            ) from e

    async def fetch_document(self) -> Document:
        """
        Returns the normalized document.

        Raises:
            UpstreamUnavailable: GitHub answered non-2xx or was unreachable
            MalformedPayload: file content is not a JSON object
        """
        gist = await self._fetch_gist()
        file = (gist.get("files") or {}).get(self.file_name)

        if not file:
            logger.warning(
                "Gist file missing, starting from an empty document",
                extra={"gist_file": self.file_name}
            )
            return normalize({})

        if file.get("truncated") and file.get("raw_url"):
            logger.info(
                "Gist file truncated, fetching raw content",
                extra={"gist_file": self.file_name}
            )
            # raw_url is pre-signed, no auth header needed
            response = await self._request(
                "GET", file["raw_url"], "GitHub Gist raw fetch failed"
            )
            text = response.text
        else:
            text = file.get("content") or "{}"

        return normalize(self._parse(text))

    def _parse(self, text: str) -> Dict[str, Any]:
        try:
            raw = json.loads(text)
        except ValueError as e:
            logger.error("Gist file is not valid JSON", extra={"gist_file": self.file_name})
            raise MalformedPayload() from e
        if not isinstance(raw, dict):
            logger.error("Gist file is not a JSON object", extra={"gist_file": self.file_name})
            raise MalformedPayload()
        return raw

    async def replace_document(self, document: Document) -> None:
        """
        Overwrites the gist file with the pretty-printed document.

        Raises:
            UpstreamUnavailable: GitHub answered non-2xx or was unreachable
        """
        content = json.dumps(document, indent=2, ensure_ascii=False)
        payload = {"files": {self.file_name: {"content": content}}}

        await self._request(
            "PATCH",
            self.gist_url,
            "GitHub Gist save failed",
            headers={**self._headers, "Content-Type": "application/json"},
            json=payload,
        )
        logger.info(
            f"Gist document saved ({len(content)} chars)",
            extra={"gist_file": self.file_name}
        )

    async def ping(self) -> bool:
        try:
            await self._fetch_gist()
            return True
        except UpstreamUnavailable:
            return False
        except Exception as e:
            logger.error(f"Gist health check failed: {e}", exc_info=True)
            return False

    async def close(self) -> None:
        await self._client.aclose()
