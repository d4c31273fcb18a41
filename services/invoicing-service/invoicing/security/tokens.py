"""Utilities for issuing and validating session JWTs."""

from __future__ import annotations

import time
from typing import Any

import jwt

ALGORITHM = "HS256"


class TokenSigner:
    """Issue and verify HS256 session tokens with a process-wide secret.

    Parameters
    ----------
    secret:
        Signing key. Changing it invalidates every outstanding token.
    issuer:
        Value of the ``iss`` claim, checked on decode.
    ttl_seconds:
        Lifetime of issued tokens.
    """

    def __init__(self, secret: str, *, issuer: str, ttl_seconds: int) -> None:
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret
        self._issuer = issuer
        self.ttl_seconds = ttl_seconds

    def issue(self, *, account_id: str, email: str) -> str:
        """Create a signed JWT for ``account_id`` expiring after ``ttl_seconds``."""
        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": self._issuer,
            "sub": account_id,
            "email": email,
            "iat": now,
            "exp": now + self.ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> dict[str, Any]:
        """Decode and verify a JWT returning its payload.

        Raises
        ------
        jwt.PyJWTError
            Propagated when the token is malformed, expired, or signed with
            another secret or issuer.
        """
        return jwt.decode(
            token,
            self._secret,
            algorithms=[ALGORITHM],
            issuer=self._issuer,
            options={"require": ["exp", "iat", "sub"]},
        )
