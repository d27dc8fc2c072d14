# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""FastAPI dependencies resolving the engines wired by the app factory."""

from beartype import beartype
from fastapi import Request

from ..core.config import Settings
from ..oauth.exchange import ExchangeEngine
from ..oauth.verification import VerificationEngine


@beartype
def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


@beartype
def get_exchange_engine(request: Request) -> ExchangeEngine:
    """Exchange engine shared by all requests."""
    return request.app.state.exchange_engine


@beartype
def get_verification_engine(request: Request) -> VerificationEngine:
    """Verification engine shared by all requests."""
    return request.app.state.verification_engine
