"""FastAPI application wiring for the invoicing service."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .api.errors import install_error_handlers
from .api.routes import router
from .config import get_settings
from .domain.service import IdentityService
from .logging_config import setup_logging
from .repository import AccountRepository, CompanyRepository, client_repository, invoice_repository
from .security.tokens import TokenSigner
from .storage import build_record_store

settings = get_settings()
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the record store, repositories and identity service for the app lifecycle."""
    if not settings.jwt_secret:
        raise RuntimeError("JWT_SECRET must be set before starting the service")

    store = build_record_store(settings.storage_backend, settings.data_dir)
    signer = TokenSigner(
        settings.jwt_secret,
        issuer=settings.jwt_issuer,
        ttl_seconds=settings.jwt_ttl_seconds,
    )
    app.state.token_signer = signer
    app.state.identity_service = IdentityService(
        AccountRepository(store),
        signer,
        hash_rounds=settings.bcrypt_rounds,
    )
    app.state.companies = CompanyRepository(store)
    app.state.clients = client_repository(store)
    app.state.invoices = invoice_repository(store)
    yield


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials="*" not in settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)

install_error_handlers(app)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(router)


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(
        "invoicing.main:app",
        host=settings.http_host,
        port=settings.http_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
