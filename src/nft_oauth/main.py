# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""NFT OAuth - application factory and entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from beartype import beartype
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import health_router, oauth_router
from .api.response_patterns import APIResponseHandler
from .core.config import Settings, get_settings
from .core.errors import ValidationError
from .core.logging_utils import get_logger
from .ledger import LedgerGateway, create_ledger_from_settings
from .oauth.clients import ClientRegistry
from .oauth.code_store import AuthorizationCodeStore, create_code_store_from_settings
from .oauth.codec import BearerTokenCodec
from .oauth.exchange import ExchangeEngine
from .oauth.verification import VerificationEngine

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    settings: Settings = app.state.settings
    logger.info(
        "Starting %s in %s mode (ledger=%s, code store=%s)",
        settings.app_name,
        settings.api_env,
        settings.ledger_backend,
        settings.code_store_backend,
    )
    await app.state.code_store.connect()

    yield

    logger.info("Shutting down %s", settings.app_name)
    await app.state.code_store.disconnect()
    await app.state.ledger.close()


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return APIResponseHandler.error(ValidationError("Request body failed validation"))


@beartype
def create_app(
    settings: Settings | None = None,
    ledger: LedgerGateway | None = None,
    code_store: AuthorizationCodeStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings, read from the environment when omitted
        ledger: Ledger gateway, built from settings when omitted
        code_store: Authorization code store, built from settings when omitted

    Returns:
        FastAPI: Configured application instance
    """
    if settings is None:
        settings = get_settings()
    get_logger("nft_oauth").setLevel(settings.log_level)

    if ledger is None:
        ledger = create_ledger_from_settings(settings)
    if code_store is None:
        code_store = create_code_store_from_settings(settings)
    codec = BearerTokenCodec.from_settings(settings)
    clients = ClientRegistry.from_settings(settings)

    app = FastAPI(
        title=settings.app_name,
        description="OAuth2 authorization server issuing NFT-backed access tokens",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.ledger = ledger
    app.state.code_store = code_store
    app.state.exchange_engine = ExchangeEngine.from_settings(
        settings, code_store, ledger, codec, clients
    )
    app.state.verification_engine = VerificationEngine(ledger, codec)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(oauth_router)
    app.include_router(health_router)

    return app


# Create the application instance
app = create_app()


@beartype
def main() -> None:
    """Run the main application entry point."""
    settings = get_settings()
    uvicorn.run(
        "nft_oauth.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level="info" if not settings.is_production else "error",
    )


if __name__ == "__main__":
    main()
