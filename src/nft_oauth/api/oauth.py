# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""OAuth endpoints backed by the NFT ledger."""

from typing import Any

from beartype import beartype
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import (
    GatewayError,
    MintFailed,
    OAuthNFTError,
    TokenInactive,
    ValidationError,
)
from ..core.logging_utils import get_logger
from ..oauth.exchange import ExchangeEngine
from ..oauth.verification import VerificationEngine
from .dependencies import get_exchange_engine, get_verification_engine
from .response_patterns import APIResponseHandler

logger = get_logger(__name__)

router = APIRouter(prefix="/oauth", tags=["oauth"])

TOKEN_REQUIRED = "Token required"


class _RequestBody(BaseModel):
    # Fields are passed through verbatim; unknown OAuth parameters are ignored
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        validate_assignment=True,
        validate_default=True,
        populate_by_name=True,
    )


class AuthorizeRequest(_RequestBody):
    """Authorization request approved by the subject's wallet."""

    client_id: str | None = Field(default=None, alias="clientId")
    redirect_uri: str | None = Field(default=None, alias="redirectUri")
    scope: str | None = None
    state: str | None = None
    user_address: str | None = Field(default=None, alias="userAddress")


class TokenRequest(_RequestBody):
    """Authorization code exchange request."""

    code: str | None = None
    client_id: str | None = Field(default=None, alias="clientId")
    client_secret: str | None = Field(default=None, alias="clientSecret")
    redirect_uri: str | None = Field(default=None, alias="redirectUri")


class BearerTokenRequest(_RequestBody):
    """Request carrying a bearer token to verify or revoke."""

    token: str | None = None


class SignedRevokeRequest(_RequestBody):
    """Revocation of a ledger record authorized by its subject's signature."""

    token_id: int | None = Field(default=None, ge=0, alias="tokenId")
    user_address: str | None = Field(default=None, alias="userAddress")
    signature: str | None = None


@router.post("/authorize")
@beartype
async def authorize(
    body: AuthorizeRequest,
    engine: ExchangeEngine = Depends(get_exchange_engine),
) -> JSONResponse:
    """Issue an authorization code for an approved grant.

    Returns:
        ``{code, state, redirectUri}`` where ``redirectUri`` carries the
        code and state as query parameters
    """
    result = await engine.authorize(
        body.client_id,
        body.redirect_uri,
        body.user_address,
        scope=body.scope,
        state=body.state,
    )
    if result.is_err():
        error = result.unwrap_err()
        if isinstance(error, ValidationError):
            return APIResponseHandler.error(error)
        return APIResponseHandler.error(
            error,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Authorization failed",
        )
    return APIResponseHandler.ok(result.unwrap().to_public())


@router.post("/token")
@beartype
async def token(
    body: TokenRequest,
    engine: ExchangeEngine = Depends(get_exchange_engine),
) -> JSONResponse:
    """Exchange an authorization code for a bearer token backed by a minted NFT."""
    result = await engine.exchange(
        body.code, body.client_id, body.client_secret, body.redirect_uri
    )
    if result.is_err():
        error = result.unwrap_err()
        if isinstance(error, GatewayError) and not isinstance(error, MintFailed):
            return APIResponseHandler.error(error, message=MintFailed.public_message)
        return APIResponseHandler.error(error)
    return APIResponseHandler.ok(result.unwrap().to_public())


@router.post("/verify")
@beartype
async def verify(
    body: BearerTokenRequest,
    engine: VerificationEngine = Depends(get_verification_engine),
) -> JSONResponse:
    """Verify a bearer token locally and against its ledger record."""
    if not body.token:
        return APIResponseHandler.message(TOKEN_REQUIRED)

    result = await engine.verify(body.token)
    if result.is_err():
        return APIResponseHandler.error(result.unwrap_err())

    verification = result.unwrap()
    if not verification.valid:
        message = (
            TokenInactive.public_message
            if verification.reason == TokenInactive.reason
            else "Invalid token"
        )
        return APIResponseHandler.message(
            message, status_code=status.HTTP_401_UNAUTHORIZED
        )
    return APIResponseHandler.ok(verification.to_public())


@router.post("/revoke")
@beartype
async def revoke(
    body: BearerTokenRequest,
    engine: VerificationEngine = Depends(get_verification_engine),
) -> JSONResponse:
    """Revoke the ledger record behind a bearer token."""
    if not body.token:
        return APIResponseHandler.message(TOKEN_REQUIRED)

    result = await engine.revoke(body.token)
    if result.is_err():
        return _revocation_failed(result.unwrap_err())
    return APIResponseHandler.ok({"success": True, "message": "Token revoked"})


@router.post("/revoke/signed")
@beartype
async def revoke_signed(
    body: SignedRevokeRequest,
    engine: VerificationEngine = Depends(get_verification_engine),
) -> JSONResponse:
    """Revoke a ledger record by id with the subject's wallet signature.

    Unlike ``/oauth/revoke`` this works after the bearer token has expired.
    """
    if body.token_id is None or not body.user_address or not body.signature:
        return APIResponseHandler.error(
            ValidationError("revoke/signed: tokenId, userAddress and signature are required")
        )

    result = await engine.revoke_with_signature(
        body.token_id, body.user_address, body.signature
    )
    if result.is_err():
        return APIResponseHandler.error(result.unwrap_err())
    return APIResponseHandler.ok({"success": True, "message": "Token revoked"})


@router.get("/user/tokens/{address}")
@beartype
async def user_tokens(
    address: str,
    engine: VerificationEngine = Depends(get_verification_engine),
) -> JSONResponse:
    """List every ledger record minted to a subject."""
    result = await engine.list_user_tokens(address)
    if result.is_err():
        return APIResponseHandler.error(
            result.unwrap_err(),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Failed to fetch user tokens",
        )
    tokens: list[dict[str, Any]] = [record.to_public() for record in result.unwrap()]
    return APIResponseHandler.ok({"tokens": tokens})


def _revocation_failed(error: OAuthNFTError) -> JSONResponse:
    return APIResponseHandler.error(
        error,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Revocation failed",
    )
