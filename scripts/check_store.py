"""
Quick check of the Gist document store

Loads .env, fetches the document through the application's store client
and prints what it holds.

Run: python scripts/check_store.py
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables before settings are read
load_dotenv()

import logging

from app.core.config import settings
from app.core.exceptions import ProPricingError
from app.db.gist import GistDocumentStore
from app.services.otp_service import OtpState, otp_state

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


def count(value) -> str:
    return str(len(value)) if isinstance(value, (list, dict)) else f"not a list ({type(value).__name__})"


async def check_store() -> bool:
    """Fetch the document and print a summary"""
    print("=" * 60)
    print("  Gist Document Store Check")
    print("=" * 60 + "\n")

    if not settings.store_configured:
        print("❌ GIST_ID and GITHUB_TOKEN must be set in .env file")
        return False

    store = GistDocumentStore(
        gist_id=settings.GIST_ID,
        token=settings.GITHUB_TOKEN,
        file_name=settings.GIST_FILE,
        api_url=settings.GITHUB_API_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

    try:
        document = await store.fetch_document()
    except ProPricingError as e:
        print(f"❌ {e.message}")
        return False
    finally:
        await store.close()

    otps = document["otps"] if isinstance(document["otps"], dict) else {}
    expired = sum(
        1 for email in otps if otp_state(document, email) == OtpState.EXPIRED
    )

    print(f"✅ Fetched {settings.GIST_FILE} from gist {settings.GIST_ID}")
    print(f"   version:   {document['version']}")
    print(f"   users:     {count(document['users'])}")
    print(f"   products:  {count(document['products'])}")
    print(f"   templates: {count(document['templates'])}")
    print(f"   logs:      {count(document['logs'])}")
    print(f"   otps:      {len(otps)} ({expired} expired)")
    print(f"\nResend mail: {'configured' if settings.mail_configured else 'missing RESEND_API_KEY'}")
    return True


if __name__ == "__main__":
    ok = asyncio.run(check_store())
    sys.exit(0 if ok else 1)
