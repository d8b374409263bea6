"""
FastAPI dependency injection.

Settings and the object store are created once by the application
factory and kept on app.state. Dependencies hand them to route handlers,
which means:
- Routes never build their own clients (easier to test)
- Tests inject a MockObjectStore through create_app
- Nothing request-scoped lives in module globals
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from ..config.settings import Settings
from ..core.auth import credentials_match, parse_basic_authorization
from ..infrastructure.storage.client import ObjectStore

logger = logging.getLogger(__name__)


class AuthenticationRequired(Exception):
    """Raised when Basic credentials are missing or wrong."""

    def __init__(self, realm: str) -> None:
        super().__init__(f"Authentication required for realm {realm!r}")
        self.realm = realm


# ---------------------------------------------------------------------------
# Application-scoped Dependencies
# ---------------------------------------------------------------------------

def get_app_settings(request: Request) -> Settings:
    """Provide the settings the application was created with."""
    return request.app.state.settings


def get_object_store(request: Request) -> ObjectStore:
    """Provide the shared, read-only object store."""
    return request.app.state.object_store


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_basic_auth(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> None:
    """
    Enforce Basic auth when both username and password are configured.

    Raises AuthenticationRequired (rendered as a 401 challenge) when the
    header is missing or the credentials don't match. Without configured
    credentials the check is skipped entirely.
    """
    if not settings.requires_auth:
        return

    supplied = parse_basic_authorization(request.headers.get("Authorization"))

    if settings.verbose:
        logger.info(
            "Authorization attempt",
            extra={"username": supplied.username if supplied else ""}
        )

    if not credentials_match(supplied, settings.username, settings.password):
        logger.warning(
            "Rejected request with invalid credentials",
            extra={"path": request.url.path, "has_credentials": supplied is not None}
        )
        raise AuthenticationRequired(settings.realm)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
ObjectStoreDep = Annotated[ObjectStore, Depends(get_object_store)]
