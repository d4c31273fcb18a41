"""Owner-scoped record types persisted by :mod:`invoicing.repository`.

Each record keeps ``id`` and ``owner_id`` as identity fields; everything
listed in ``MUTABLE_FIELDS`` may be replaced by an update. ``FIELD_NAMES``
maps Python attribute names to the camelCase keys used on disk and over HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

RecordT = TypeVar("RecordT", bound="OwnedRecord")


class OwnedRecord:
    """Mixin providing JSON conversion for owner-scoped dataclasses."""

    FIELD_NAMES: ClassVar[dict[str, str]] = {}
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ()

    id: str
    owner_id: str

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id, "ownerId": self.owner_id}
        for attr, key in self.FIELD_NAMES.items():
            payload[key] = getattr(self, attr)
        return payload

    @classmethod
    def from_dict(cls: type[RecordT], data: dict[str, Any]) -> RecordT:
        values = {attr: data[key] for attr, key in cls.FIELD_NAMES.items() if key in data}
        return cls(id=data["id"], owner_id=data["ownerId"], **values)


@dataclass(slots=True)
class Client(OwnedRecord):
    FIELD_NAMES: ClassVar[dict[str, str]] = {
        "email": "email",
        "name": "name",
        "company_name": "companyName",
        "company_email": "companyEmail",
        "company_address": "companyAddress",
        "gst_number": "gstNumber",
    }
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = tuple(FIELD_NAMES)

    id: str
    owner_id: str
    email: Any = None
    name: Any = None
    company_name: Any = None
    company_email: Any = None
    company_address: Any = None
    gst_number: Any = None


@dataclass(slots=True)
class Company(OwnedRecord):
    FIELD_NAMES: ClassVar[dict[str, str]] = {
        "company_name": "companyName",
        "company_email": "companyEmail",
        "company_contact_no": "companyContactNo",
        "address": "address",
        "gst_number": "gstNumber",
    }
    # Company profiles are immutable once registered.
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = ()

    id: str
    owner_id: str
    company_name: Any = None
    company_email: Any = None
    company_contact_no: Any = None
    address: Any = None
    gst_number: Any = None


@dataclass(slots=True)
class Invoice(OwnedRecord):
    FIELD_NAMES: ClassVar[dict[str, str]] = {
        "invoice_date": "invoiceDate",
        "invoice_number": "invoiceNumber",
        "invoice_due_date": "invoiceDueDate",
        "client_id": "clientId",
        "items": "items",
    }
    MUTABLE_FIELDS: ClassVar[tuple[str, ...]] = tuple(FIELD_NAMES)

    id: str
    owner_id: str
    invoice_date: Any = None
    invoice_number: Any = None
    invoice_due_date: Any = None
    client_id: Any = None
    items: Any = field(default_factory=list)
