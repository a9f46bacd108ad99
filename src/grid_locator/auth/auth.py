"""Bearer token check for the Grid Locator API.

Every endpoint under ``/api/v1`` shares one configured key
(``API_TOKEN``). A deployment without a key refuses requests with 503
instead of letting them through.
"""

from __future__ import annotations

import secrets

from fastapi import HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from grid_locator.auth.config import settings

security = HTTPBearer()


def get_api_token() -> str:
    """Retrieve the configured API token from settings.

    Raises
    ------
    ValueError
        If API_TOKEN is not configured or is empty.
    """
    token = settings.API_TOKEN
    if not token:
        raise ValueError("API_TOKEN is not configured")
    return token


def verify_token(credentials: HTTPAuthorizationCredentials = Security(security)) -> str:
    """Check the Bearer token of a layer or assignment request.

    Raises
    ------
    HTTPException
        503 when the service has no API_TOKEN configured; 403 when the
        presented token does not match it.
    """
    try:
        api_token = get_api_token()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{settings.APP_NAME}: {e}",
        ) from e

    token = credentials.credentials
    if not secrets.compare_digest(token.encode("utf-8"), api_token.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Invalid API token for {settings.APP_NAME}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return token
