"""Identity service orchestrating registration, credential checks and token issuance."""

from __future__ import annotations

import logging
import uuid

from .account import Account
from .contracts import IssuedToken, RegisterAccountInput
from .errors import AuthError, ValidationError
from ..repository import AccountRepository
from ..security.passwords import DEFAULT_ROUNDS, hash_password, verify_password
from ..security.tokens import TokenSigner

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class IdentityService:
    """Account workflows backed by the account repository."""

    def __init__(
        self,
        repository: AccountRepository,
        signer: TokenSigner,
        *,
        hash_rounds: int = DEFAULT_ROUNDS,
    ) -> None:
        self._repository = repository
        self._signer = signer
        self._hash_rounds = hash_rounds

    def register(self, payload: RegisterAccountInput) -> Account:
        """Create an account with a bcrypt-hashed password.

        Raises ``ConflictError`` when the email is already registered; the
        comparison is an exact, case-sensitive match.
        """
        if not payload.email or not payload.password:
            raise ValidationError("Email and password are required")

        account = Account(
            id=str(uuid.uuid4()),
            email=payload.email,
            password_hash=hash_password(payload.password, self._hash_rounds),
            first_name=payload.first_name,
            last_name=payload.last_name,
            gender=payload.gender,
        )
        self._repository.add(account)
        logger.info("account %s registered", account.id)
        return account

    def login(self, email: str, password: str) -> IssuedToken:
        """Check credentials and issue a session token.

        Unknown emails and wrong passwords fail with the same ``AuthError`` so
        callers cannot probe which accounts exist.
        """
        account = self._repository.find_by_email(email)
        if account is None or not verify_password(password, account.password_hash):
            logger.warning("failed login attempt")
            raise AuthError(INVALID_CREDENTIALS)

        token = self._signer.issue(account_id=account.id, email=account.email)
        logger.info("account %s logged in", account.id)
        return IssuedToken(token=token, expires_in=self._signer.ttl_seconds)
