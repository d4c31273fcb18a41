"""Repositories enforcing account uniqueness and per-owner record isolation."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Generic, Mapping

from .domain.account import Account
from .domain.errors import ConflictError, NotFoundError
from .domain.records import Client, Company, Invoice, RecordT
from .storage import ACCOUNTS, CLIENTS, COMPANIES, INVOICES, RecordStore

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class AccountRepository:
    """Account persistence keyed by id, with a unique (case-sensitive) email."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def add(self, account: Account) -> Account:
        """Append ``account`` unless its email is already registered."""
        with self._store.lock(ACCOUNTS):
            rows = self._store.load(ACCOUNTS)
            if any(row.get("email") == account.email for row in rows):
                raise ConflictError("User already exists")
            rows.append(account.to_dict())
            self._store.save(ACCOUNTS, rows)
        return account

    def find_by_email(self, email: str) -> Account | None:
        with self._store.lock(ACCOUNTS):
            rows = self._store.load(ACCOUNTS)
        for row in rows:
            if row.get("email") == email:
                return Account.from_dict(row)
        return None

    def get(self, account_id: str) -> Account | None:
        with self._store.lock(ACCOUNTS):
            rows = self._store.load(ACCOUNTS)
        for row in rows:
            if row.get("id") == account_id:
                return Account.from_dict(row)
        return None


class OwnedRepository(Generic[RecordT]):
    """CRUD over one collection, restricted to the records of a single owner.

    Every operation takes the caller's account id and only ever matches rows
    whose ``ownerId`` equals it. A record that exists but belongs to another
    owner is reported exactly like a missing one.

    Parameters
    ----------
    store:
        Backing :class:`~invoicing.storage.RecordStore`.
    collection:
        Collection name inside the store.
    record_type:
        Dataclass used to convert stored rows.
    label:
        Human readable name used in error messages ("Client", "Invoice").
    one_per_owner:
        Reject a second ``create`` for the same owner with ``ConflictError``.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        collection: str,
        record_type: type[RecordT],
        label: str,
        one_per_owner: bool = False,
    ) -> None:
        self._store = store
        self._collection = collection
        self._record_type = record_type
        self._label = label
        self._one_per_owner = one_per_owner

    @property
    def not_found_message(self) -> str:
        return f"{self._label} not found or unauthorized"

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> RecordT:
        """Store a new record for ``owner_id`` with a server-assigned id."""
        record = self._record_type(
            id=_new_id(),
            owner_id=owner_id,
            **self._known_fields(fields),
        )
        with self._store.lock(self._collection):
            rows = self._store.load(self._collection)
            if self._one_per_owner and any(self._owned_by(row, owner_id) for row in rows):
                raise ConflictError(f"{self._label} already registered")
            rows.append(record.to_dict())
            self._store.save(self._collection, rows)
        logger.info("%s %s created for owner %s", self._collection, record.id, owner_id)
        return record

    def list(self, owner_id: str) -> list[RecordT]:
        """Return the owner's records in stored order."""
        with self._store.lock(self._collection):
            rows = self._store.load(self._collection)
        return [self._record_type.from_dict(row) for row in rows if self._owned_by(row, owner_id)]

    def find_for_owner(self, owner_id: str) -> RecordT | None:
        """Return the owner's first record, if any."""
        records = self.list(owner_id)
        return records[0] if records else None

    def get(self, owner_id: str, record_id: str) -> RecordT:
        with self._store.lock(self._collection):
            rows = self._store.load(self._collection)
        index = self._index_of(rows, owner_id, record_id)
        return self._record_type.from_dict(rows[index])

    def update(self, owner_id: str, record_id: str, fields: Mapping[str, Any]) -> RecordT:
        """Replace the mutable fields of a record; ``id`` and ``ownerId`` never change."""
        changes = self._known_fields(fields)
        with self._store.lock(self._collection):
            rows = self._store.load(self._collection)
            index = self._index_of(rows, owner_id, record_id)
            record = self._record_type.from_dict(rows[index])
            for attr in self._record_type.MUTABLE_FIELDS:
                setattr(record, attr, changes.get(attr))
            rows[index] = {**rows[index], **record.to_dict()}
            self._store.save(self._collection, rows)
        logger.info("%s %s updated for owner %s", self._collection, record_id, owner_id)
        return record

    def delete(self, owner_id: str, record_id: str) -> None:
        with self._store.lock(self._collection):
            rows = self._store.load(self._collection)
            index = self._index_of(rows, owner_id, record_id)
            del rows[index]
            self._store.save(self._collection, rows)
        logger.info("%s %s deleted for owner %s", self._collection, record_id, owner_id)

    def _index_of(self, rows: list[dict[str, Any]], owner_id: str, record_id: str) -> int:
        for index, row in enumerate(rows):
            if row.get("id") == record_id and self._owned_by(row, owner_id):
                return index
        raise NotFoundError(self.not_found_message)

    def _known_fields(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        # Identity fields are assigned by the repository, never by the caller.
        return {attr: fields[attr] for attr in self._record_type.FIELD_NAMES if attr in fields}

    @staticmethod
    def _owned_by(row: Mapping[str, Any], owner_id: str) -> bool:
        return row.get("ownerId") == owner_id


class CompanyRepository:
    """Company profile of an account: registered once, read back, never changed."""

    def __init__(self, store: RecordStore) -> None:
        self._records: OwnedRepository[Company] = OwnedRepository(
            store,
            collection=COMPANIES,
            record_type=Company,
            label="Company",
            one_per_owner=True,
        )

    def register(self, owner_id: str, fields: Mapping[str, Any]) -> Company:
        return self._records.create(owner_id, fields)

    def get_for_owner(self, owner_id: str) -> Company:
        company = self._records.find_for_owner(owner_id)
        if company is None:
            raise NotFoundError("Company not found")
        return company


def client_repository(store: RecordStore) -> OwnedRepository[Client]:
    return OwnedRepository(store, collection=CLIENTS, record_type=Client, label="Client")


def invoice_repository(store: RecordStore) -> OwnedRepository[Invoice]:
    return OwnedRepository(store, collection=INVOICES, record_type=Invoice, label="Invoice")
