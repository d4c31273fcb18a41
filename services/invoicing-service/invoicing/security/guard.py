"""Bearer-token guard applied to every owner-scoped route."""

from __future__ import annotations

import logging

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..domain.contracts import Principal
from ..domain.errors import AuthError
from ..metrics import AUTH_EVENTS
from .tokens import TokenSigner

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_token_signer(request: Request) -> TokenSigner:
    """Resolve the `TokenSigner` stored on the FastAPI application state."""
    signer: TokenSigner = request.app.state.token_signer
    return signer


def authenticate(signer: TokenSigner, token: str | None) -> Principal:
    """Verify ``token`` and return the caller it was issued to."""
    if not token:
        AUTH_EVENTS.labels(event="token_missing").inc()
        raise AuthError("No token provided")
    try:
        claims = signer.decode(token)
    except jwt.PyJWTError as exc:
        AUTH_EVENTS.labels(event="token_rejected").inc()
        logger.info("rejected session token: %s", exc)
        raise AuthError("Invalid token") from exc
    return Principal(account_id=claims["sub"], email=claims.get("email", ""))


def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    signer: TokenSigner = Depends(get_token_signer),
) -> Principal:
    """FastAPI dependency yielding the authenticated caller for one request."""
    token = credentials.credentials if credentials else None
    return authenticate(signer, token)
