"""HTTP route definitions for the invoicing service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from .schemas import (
    ClientFields,
    ClientResponse,
    CompanyFields,
    CompanyResponse,
    InvoiceFields,
    InvoiceResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)
from ..config import get_settings
from ..domain.contracts import Principal, RegisterAccountInput
from ..domain.errors import AuthError, ConflictError
from ..domain.records import Client, Invoice
from ..domain.service import IdentityService
from ..metrics import AUTH_EVENTS
from ..repository import CompanyRepository, OwnedRepository
from ..security.guard import get_principal
from ..security.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

router = APIRouter()

settings = get_settings()

rate_limiter = SlidingWindowRateLimiter(
    max_requests=settings.rate_limit_requests,
    window_seconds=settings.rate_limit_window_seconds,
)


def get_identity_service(request: Request) -> IdentityService:
    """Resolve the `IdentityService` stored on the FastAPI application state."""
    service: IdentityService = request.app.state.identity_service
    return service


def get_companies(request: Request) -> CompanyRepository:
    return request.app.state.companies


def get_clients(request: Request) -> OwnedRepository[Client]:
    return request.app.state.clients


def get_invoices(request: Request) -> OwnedRepository[Invoice]:
    return request.app.state.invoices


def _enforce_rate_limit(key: str) -> None:
    if not rate_limiter.allow(key):
        logger.warning("rate limit exceeded for %s", key.split(":", 1)[0])
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="rate limited")


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# --------------------------------------------------------------------------
# Accounts
# --------------------------------------------------------------------------


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    request: Request,
    payload: RegisterRequest,
    service: IdentityService = Depends(get_identity_service),
) -> RegisterResponse:
    """Register an account; the email must not be taken yet."""
    _enforce_rate_limit(f"register:{_client_host(request)}")
    try:
        account = service.register(
            RegisterAccountInput(
                email=payload.email,
                password=payload.password,
                first_name=payload.firstname,
                last_name=payload.lastname,
                gender=payload.gender,
            )
        )
    except ConflictError:
        AUTH_EVENTS.labels(event="register_conflict").inc()
        raise
    AUTH_EVENTS.labels(event="registered").inc()
    return RegisterResponse(message="User registered successfully", user_id=account.id)


@router.post("/login", response_model=TokenResponse)
def login(
    request: Request,
    payload: LoginRequest,
    service: IdentityService = Depends(get_identity_service),
) -> TokenResponse:
    """Exchange email and password for a session token."""
    _enforce_rate_limit(f"login:{_client_host(request)}:{payload.email}")
    try:
        issued = service.login(payload.email, payload.password)
    except AuthError:
        AUTH_EVENTS.labels(event="login_failed").inc()
        raise
    AUTH_EVENTS.labels(event="login").inc()
    return TokenResponse(token=issued.token, expires_in=issued.expires_in)


# --------------------------------------------------------------------------
# Company
# --------------------------------------------------------------------------


@router.post("/register-company", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register_company(
    payload: CompanyFields,
    principal: Principal = Depends(get_principal),
    companies: CompanyRepository = Depends(get_companies),
) -> MessageResponse:
    """Register the caller's company profile; only one is allowed per account."""
    companies.register(principal.account_id, payload.model_dump())
    return MessageResponse(message="Company registered successfully")


@router.get("/company", response_model=CompanyResponse)
def get_company(
    principal: Principal = Depends(get_principal),
    companies: CompanyRepository = Depends(get_companies),
) -> CompanyResponse:
    return CompanyResponse.from_domain(companies.get_for_owner(principal.account_id))


# --------------------------------------------------------------------------
# Clients
# --------------------------------------------------------------------------


@router.post("/add-client", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def add_client(
    payload: ClientFields,
    principal: Principal = Depends(get_principal),
    clients: OwnedRepository[Client] = Depends(get_clients),
) -> MessageResponse:
    clients.create(principal.account_id, payload.model_dump())
    return MessageResponse(message="Client added successfully")


@router.get("/clients", response_model=list[ClientResponse])
def list_clients(
    principal: Principal = Depends(get_principal),
    clients: OwnedRepository[Client] = Depends(get_clients),
) -> list[ClientResponse]:
    """Return the caller's clients in the order they were added."""
    return [ClientResponse.from_domain(client) for client in clients.list(principal.account_id)]


@router.get("/client/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: str,
    principal: Principal = Depends(get_principal),
    clients: OwnedRepository[Client] = Depends(get_clients),
) -> ClientResponse:
    return ClientResponse.from_domain(clients.get(principal.account_id, client_id))


@router.put("/update-client/{client_id}", response_model=MessageResponse)
def update_client(
    client_id: str,
    payload: ClientFields,
    principal: Principal = Depends(get_principal),
    clients: OwnedRepository[Client] = Depends(get_clients),
) -> MessageResponse:
    clients.update(principal.account_id, client_id, payload.model_dump())
    return MessageResponse(message="Client updated successfully")


@router.delete("/delete-client/{client_id}", response_model=MessageResponse)
def delete_client(
    client_id: str,
    principal: Principal = Depends(get_principal),
    clients: OwnedRepository[Client] = Depends(get_clients),
) -> MessageResponse:
    clients.delete(principal.account_id, client_id)
    return MessageResponse(message="Client deleted successfully")


# --------------------------------------------------------------------------
# Invoices
# --------------------------------------------------------------------------


@router.post("/add-invoice", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def add_invoice(
    payload: InvoiceFields,
    principal: Principal = Depends(get_principal),
    invoices: OwnedRepository[Invoice] = Depends(get_invoices),
) -> MessageResponse:
    invoices.create(principal.account_id, payload.model_dump())
    return MessageResponse(message="Invoice added successfully")


@router.get("/user-invoices", response_model=list[InvoiceResponse])
def list_invoices(
    principal: Principal = Depends(get_principal),
    invoices: OwnedRepository[Invoice] = Depends(get_invoices),
) -> list[InvoiceResponse]:
    return [InvoiceResponse.from_domain(invoice) for invoice in invoices.list(principal.account_id)]


@router.get("/invoice/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: str,
    principal: Principal = Depends(get_principal),
    invoices: OwnedRepository[Invoice] = Depends(get_invoices),
) -> InvoiceResponse:
    return InvoiceResponse.from_domain(invoices.get(principal.account_id, invoice_id))


@router.put("/update-invoice/{invoice_id}", response_model=MessageResponse)
def update_invoice(
    invoice_id: str,
    payload: InvoiceFields,
    principal: Principal = Depends(get_principal),
    invoices: OwnedRepository[Invoice] = Depends(get_invoices),
) -> MessageResponse:
    invoices.update(principal.account_id, invoice_id, payload.model_dump())
    return MessageResponse(message="Invoice updated successfully")


@router.delete("/delete-invoice/{invoice_id}", response_model=MessageResponse)
def delete_invoice(
    invoice_id: str,
    principal: Principal = Depends(get_principal),
    invoices: OwnedRepository[Invoice] = Depends(get_invoices),
) -> MessageResponse:
    invoices.delete(principal.account_id, invoice_id)
    return MessageResponse(message="Invoice deleted successfully")
