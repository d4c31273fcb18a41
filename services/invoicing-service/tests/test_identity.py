from __future__ import annotations

import jwt
import pytest

from invoicing.domain.contracts import RegisterAccountInput
from invoicing.domain.errors import AuthError, ConflictError, ValidationError
from invoicing.domain.service import IdentityService
from invoicing.repository import AccountRepository
from invoicing.security.guard import authenticate
from invoicing.security.passwords import hash_password, verify_password
from invoicing.security.tokens import TokenSigner
from invoicing.storage import InMemoryRecordStore


@pytest.fixture()
def signer() -> TokenSigner:
    return TokenSigner("unit-secret", issuer="invoicing.test", ttl_seconds=3600)


@pytest.fixture()
def service(signer):
    store = InMemoryRecordStore()
    return IdentityService(AccountRepository(store), signer, hash_rounds=4), store


def test_register_hashes_password_and_never_stores_plaintext(service):
    identity, store = service
    account = identity.register(RegisterAccountInput(email="a@x.com", password="pw1", first_name="A"))

    [row] = store.load("accounts")
    assert row["id"] == account.id
    assert row["passwordHash"].startswith("$2b$04$")
    assert "pw1" not in str(row)
    assert row["firstName"] == "A"


def test_register_rejects_duplicate_email(service):
    identity, store = service
    identity.register(RegisterAccountInput(email="a@x.com", password="pw1"))

    with pytest.raises(ConflictError):
        identity.register(RegisterAccountInput(email="a@x.com", password="pw2"))
    assert len(store.load("accounts")) == 1


def test_email_uniqueness_is_case_sensitive(service):
    identity, store = service
    identity.register(RegisterAccountInput(email="a@x.com", password="pw1"))
    identity.register(RegisterAccountInput(email="A@x.com", password="pw1"))
    assert len(store.load("accounts")) == 2


def test_register_requires_credentials(service):
    identity, _ = service
    with pytest.raises(ValidationError):
        identity.register(RegisterAccountInput(email="a@x.com", password=""))


def test_login_issues_token_with_identity_claims(service, signer):
    identity, _ = service
    account = identity.register(RegisterAccountInput(email="a@x.com", password="pw1"))

    issued = identity.login("a@x.com", "pw1")

    claims = signer.decode(issued.token)
    assert claims["sub"] == account.id
    assert claims["email"] == "a@x.com"
    assert claims["exp"] - claims["iat"] == 3600
    assert issued.expires_in == 3600


@pytest.mark.parametrize("email,password", [("a@x.com", "wrong"), ("missing@x.com", "pw1")])
def test_login_failures_share_generic_error(service, email, password):
    identity, _ = service
    identity.register(RegisterAccountInput(email="a@x.com", password="pw1"))

    with pytest.raises(AuthError) as excinfo:
        identity.login(email, password)
    assert str(excinfo.value) == "Invalid email or password"


def test_verify_password_rejects_malformed_hash():
    assert verify_password("pw", hash_password("pw", rounds=4))
    assert not verify_password("pw", "not-a-bcrypt-hash")


def test_authenticate_returns_principal(signer):
    token = signer.issue(account_id="acct-1", email="a@x.com")
    principal = authenticate(signer, token)
    assert principal.account_id == "acct-1"
    assert principal.email == "a@x.com"


def test_authenticate_rejects_missing_token(signer):
    with pytest.raises(AuthError) as excinfo:
        authenticate(signer, None)
    assert str(excinfo.value) == "No token provided"


def test_authenticate_rejects_expired_token():
    expired = TokenSigner("unit-secret", issuer="invoicing.test", ttl_seconds=-10)
    token = expired.issue(account_id="acct-1", email="a@x.com")

    with pytest.raises(AuthError) as excinfo:
        authenticate(TokenSigner("unit-secret", issuer="invoicing.test", ttl_seconds=3600), token)
    assert str(excinfo.value) == "Invalid token"


def test_authenticate_rejects_foreign_signature(signer):
    forged = TokenSigner("other-secret", issuer="invoicing.test", ttl_seconds=3600)
    token = forged.issue(account_id="acct-1", email="a@x.com")

    with pytest.raises(AuthError) as excinfo:
        authenticate(signer, token)
    assert isinstance(excinfo.value.__cause__, jwt.InvalidSignatureError)


def test_token_signer_requires_secret():
    with pytest.raises(ValueError):
        TokenSigner("", issuer="invoicing.test", ttl_seconds=60)
