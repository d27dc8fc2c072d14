# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Health endpoint."""

from beartype import beartype
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from .. import __version__
from ..core.config import Settings
from .dependencies import get_app_settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service liveness report."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        validate_default=True,
    )

    status: str = Field(..., pattern=r"^(healthy|unhealthy|degraded)$")
    version: str
    environment: str
    ledger_backend: str
    code_store_backend: str


@router.get("/health")
@beartype
async def health(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    """Report liveness and the configured backends."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.api_env,
        ledger_backend=settings.ledger_backend,
        code_store_backend=settings.code_store_backend,
    )
