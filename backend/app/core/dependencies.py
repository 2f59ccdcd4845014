"""
dependencies.py — FastAPI Dependencies for External Backends

Purpose:
- Build the Google Sheets datastore and the SMTP mailer from settings.
- Give routers a single place to `Depends()` on, so tests can replace both
  through `app.dependency_overrides`.

Both objects are built once per process and reused.
Session checks are not a dependency here; screen guards call
`app.core.session.check_session` directly.
"""

from functools import lru_cache

from app.core.config import settings
from app.data.datastore import Datastore
from app.data.email_client import EmailClient
from app.data.sheets_client import SheetsClient
from app.data.sheets_store import SheetsDatastore


@lru_cache(maxsize=1)
def _sheets_datastore() -> SheetsDatastore:
    return SheetsDatastore(SheetsClient())


def get_datastore() -> Datastore:
    """
    FastAPI dependency: the spreadsheet-backed datastore.

    Raises:
        RuntimeError: If the Google Sheets credentials are not configured
    """
    if not settings.sheets_configured:
        raise RuntimeError(
            "Google Sheets is not configured. Please set GOOGLE_SPREADSHEET_ID, "
            "GOOGLE_SHEETS_CLIENT_EMAIL and GOOGLE_SHEETS_PRIVATE_KEY."
        )
    return _sheets_datastore()


@lru_cache(maxsize=1)
def get_mailer() -> EmailClient:
    """FastAPI dependency: SMTP client for admin notification mails (may be unconfigured)."""
    return EmailClient()
