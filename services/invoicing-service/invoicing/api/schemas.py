"""Pydantic request/response models for the HTTP surface.

Field names follow the camelCase keys used by existing clients; Python code
works with the snake_case attribute names.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..domain.records import Client, Company, Invoice


class RegisterRequest(BaseModel):
    """Payload accepted by ``POST /register``."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    firstname: str | None = None
    lastname: str | None = None
    gender: str | None = None


class RegisterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    user_id: str = Field(..., alias="userId")


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str


class TokenResponse(BaseModel):
    """Session token returned after a successful login."""

    token: str
    token_type: str = "bearer"
    expires_in: int


class MessageResponse(BaseModel):
    message: str


class ClientFields(BaseModel):
    """Mutable client attributes sent on create and update."""

    model_config = ConfigDict(populate_by_name=True)

    email: Any = None
    name: Any = None
    company_name: Any = Field(default=None, alias="companyName")
    company_email: Any = Field(default=None, alias="companyEmail")
    company_address: Any = Field(default=None, alias="companyAddress")
    gst_number: Any = Field(default=None, alias="gstNumber")


class ClientResponse(ClientFields):
    id: str
    owner_id: str = Field(..., alias="ownerId")

    @classmethod
    def from_domain(cls, client: Client) -> "ClientResponse":
        return cls(
            id=client.id,
            owner_id=client.owner_id,
            **{attr: getattr(client, attr) for attr in Client.FIELD_NAMES},
        )


class CompanyFields(BaseModel):
    """Company profile submitted once per account."""

    model_config = ConfigDict(populate_by_name=True)

    company_name: Any = Field(default=None, alias="companyName")
    company_email: Any = Field(default=None, alias="companyEmail")
    company_contact_no: Any = Field(default=None, alias="companyContactNo")
    address: Any = None
    gst_number: Any = Field(default=None, alias="gstNumber")


class CompanyResponse(CompanyFields):
    id: str
    owner_id: str = Field(..., alias="ownerId")

    @classmethod
    def from_domain(cls, company: Company) -> "CompanyResponse":
        return cls(
            id=company.id,
            owner_id=company.owner_id,
            **{attr: getattr(company, attr) for attr in Company.FIELD_NAMES},
        )


class InvoiceFields(BaseModel):
    """Invoice header plus line items; items are stored verbatim."""

    model_config = ConfigDict(populate_by_name=True)

    invoice_date: Any = Field(default=None, alias="invoiceDate")
    invoice_number: Any = Field(default=None, alias="invoiceNumber")
    invoice_due_date: Any = Field(default=None, alias="invoiceDueDate")
    client_id: Any = Field(default=None, alias="clientId")
    items: Any = Field(default_factory=list)


class InvoiceResponse(InvoiceFields):
    id: str
    owner_id: str = Field(..., alias="ownerId")

    @classmethod
    def from_domain(cls, invoice: Invoice) -> "InvoiceResponse":
        return cls(
            id=invoice.id,
            owner_id=invoice.owner_id,
            **{attr: getattr(invoice, attr) for attr in Invoice.FIELD_NAMES},
        )
