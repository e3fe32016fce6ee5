"""
Request dependencies.

The console has no database of its own: every route talks to the back office
through a BackofficeClient. The caller's Authorization header is forwarded so
the back office applies the user's own permissions; BACKOFFICE_API_TOKEN is
only a fallback for requests without one (scripts, health probes).
"""
import logging
from typing import Optional

from fastapi import Request

from menusight.config import settings
from menusight.services.backoffice_client import BackofficeClient

logger = logging.getLogger(__name__)


def _forwarded_token(request: Request) -> Optional[str]:
    auth = (request.headers.get("Authorization") or "").strip()
    return auth or None


def get_backoffice_client(request: Request) -> BackofficeClient:
    """Per-request back-office client carrying the caller's credentials."""
    token = _forwarded_token(request) or settings.BACKOFFICE_API_TOKEN
    if not token:
        logger.debug("No Authorization header and no BACKOFFICE_API_TOKEN; calling back office anonymously")
    return BackofficeClient(token=token)
