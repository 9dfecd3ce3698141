"""
app/db/schema.py

Purpose: Canonical document schema

- Upgrades any stored snapshot (partial, legacy, empty) to the canonical
  document by filling absent or null top-level fields
- Capped, newest-first activity log
- Case-insensitive user lookup

Document fields:
- version: number
- users: list[dict] (email, username, passwordHash, ...)
- products: list[dict]
- templates: list[dict]
- dealerNames: dict (t1, t2, t3 -> display name)
- brandLogoUrls: dict (brand -> url)
- logoUrl: str
- logs: list[dict] (ts, user, action, meta), newest first
- otps: dict (lowercased email -> {codeHash, exp})
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from utils.constants import DOCUMENT_BASELINE_VERSION, DEFAULT_DEALER_NAMES, LOG_LIMIT
from utils.time_utils import iso_timestamp
from utils.validation_utils import email_key

Document = Dict[str, Any]

# Field order is the order of the canonical document. Factories return
# fresh containers so documents never share defaults.
CANONICAL_FIELDS: List[Tuple[str, Callable[[], Any]]] = [
    ("version", lambda: DOCUMENT_BASELINE_VERSION),
    ("users", list),
    ("products", list),
    ("templates", list),
    ("dealerNames", lambda: dict(DEFAULT_DEALER_NAMES)),
    ("brandLogoUrls", dict),
    ("logoUrl", str),
    ("logs", list),
    ("otps", dict),
]

def normalize(raw: Any = None) -> Document:
    """
    Returns a canonical document built from a possibly partial one.

    Present, non-null fields pass through unchanged (no coercion, no deep
    validation); absent or null ones get their default. Unknown fields are
    kept. Non-mapping input is treated as empty. The input is not mutated.

    Idempotent: normalize(normalize(x)) == normalize(x).
    """
    source: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

    document: Document = {}
    for field, default in CANONICAL_FIELDS:
        value = source.get(field)
        document[field] = default() if value is None else value

    for field, value in source.items():
        if field not in document:
            document[field] = value

    return document

def empty_document() -> Document:
    return normalize({})

def append_log(document: Document, user: str, action: str, meta: str = "", ts: Optional[str] = None) -> Dict[str, str]:
    """
    Prepends a log entry and evicts the oldest beyond LOG_LIMIT.

    Returns the new entry.
    """
    entry = {
        "ts": ts or iso_timestamp(),
        "user": user,
        "action": action,
        "meta": meta,
    }
    logs = document.get("logs")
    if not isinstance(logs, list):
        logs = []
        document["logs"] = logs
    logs.insert(0, entry)
    del logs[LOG_LIMIT:]
    return entry

def find_user_index(document: Document, email: str) -> int:
    """
    Index of the first user whose email matches case-insensitively, or -1.

    `email` must already be normalized (lowercased). Entries that are not
    objects or whose email is not a string never match.
    """
    users = document.get("users")
    if not isinstance(users, list):
        return -1
    for index, user in enumerate(users):
        if isinstance(user, dict) and email_key(user.get("email")) == email:
            return index
    return -1

def find_user(document: Document, email: str) -> Optional[Dict[str, Any]]:
    index = find_user_index(document, email)
    if index == -1:
        return None
    return document["users"][index]

def otp_entries(document: Document) -> Dict[str, Any]:
    """
    The document's OTP mapping; a non-object value is replaced by {}.
    """
    otps = document.get("otps")
    if not isinstance(otps, dict):
        otps = {}
        document["otps"] = otps
    return otps
