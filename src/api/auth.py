"""Bearer session and webhook API key authentication."""

import logging
import secrets
from collections.abc import Mapping
from typing import Annotated, Protocol

from fastapi import Depends, Header, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class SessionVerifier(Protocol):
    """Resolves a session token to a user id, or None if it is not valid."""

    def verify(self, token: str) -> str | None: ...


class StaticSessionVerifier:
    """Fixed token to user map, loaded from ``AUTH_SESSIONS``."""

    def __init__(self, sessions: Mapping[str, str]) -> None:
        self._sessions = dict(sessions)

    def verify(self, token: str) -> str | None:
        return self._sessions.get(token)


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    verifier: SessionVerifier = request.app.state.session_verifier
    user_id = verifier.verify(credentials.credentials)
    if not user_id:
        logger.warning("Rejected unknown session token on %s", request.url.path)
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


CurrentUser = Annotated[str, Depends(get_current_user)]


def verify_api_key(
    request: Request,
    x_api_key: Annotated[str | None, Header()] = None,
) -> str:
    """Check the webhook caller's ``X-API-Key`` against ``API_KEY``.

    An unset ``API_KEY`` rejects every call.
    """
    expected = request.app.state.settings.api.key
    if not x_api_key or not expected or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(status_code=401, detail="Invalid API key")
    return x_api_key
