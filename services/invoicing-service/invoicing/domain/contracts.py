"""Domain-level request contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RegisterAccountInput:
    """Inputs required to register an account."""

    email: str
    password: str
    first_name: str | None = None
    last_name: str | None = None
    gender: str | None = None


@dataclass(slots=True, frozen=True)
class Principal:
    """Identity extracted from a verified session token for a single request."""

    account_id: str
    email: str


@dataclass(slots=True)
class IssuedToken:
    """Signed session token handed back on login."""

    token: str
    expires_in: int
