# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Domain models for authorization grants, ledger records and bearer tokens."""

from enum import Enum
from typing import Any

from beartype import beartype
from pydantic import Field

from .base import BaseModelConfig


class AuthorizationRequest(BaseModelConfig):
    """Pending grant held by the authorization code store until exchanged."""

    client_id: str = Field(..., min_length=1, description="OAuth client identifier")
    redirect_uri: str = Field(..., min_length=1, description="Client redirect URI")
    scope: str = Field(default="read", description="Space-delimited granted scopes")
    state: str | None = Field(default=None, description="Opaque client state")
    subject_address: str = Field(
        ..., min_length=1, description="Wallet address of the approving subject"
    )


class LedgerTokenRecord(BaseModelConfig):
    """Read-only mirror of an on-chain token record."""

    token_id: int = Field(..., ge=0, description="Ledger-assigned token id")
    subject_address: str = Field(..., description="Token owner")
    client_id: str = Field(..., description="Client the grant was issued to")
    scope: str = Field(..., description="Granted scopes")
    expires_at: int = Field(..., description="Absolute expiry, unix seconds")
    revoked: bool = Field(default=False, description="One-way revocation flag")

    @beartype
    def is_valid_at(self, now: float) -> bool:
        """Derived validity predicate: not revoked and not yet expired."""
        return not self.revoked and self.expires_at > now

    @beartype
    def to_public(self) -> dict[str, Any]:
        """Serialize in the wire shape used by the HTTP surface."""
        return {
            "tokenId": str(self.token_id),
            "user": self.subject_address,
            "clientId": self.client_id,
            "scope": self.scope,
            "expiresAt": str(self.expires_at),
            "revoked": self.revoked,
        }


class TokenGrant(BaseModelConfig):
    """Claims bound into a bearer token at issuance."""

    token_id: int = Field(..., ge=0, alias="tokenId")
    subject_address: str = Field(..., min_length=1, alias="userAddress")
    client_id: str = Field(..., min_length=1, alias="clientId")
    scope: str = Field(...)


class BearerClaims(TokenGrant):
    """Full signed claim set of a bearer token."""

    issued_at: int = Field(..., alias="iat")
    expires_at: int = Field(..., alias="exp")

    @beartype
    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JWT payload; the token id travels as a string."""
        payload = self.model_dump(by_alias=True)
        payload["tokenId"] = str(self.token_id)
        return payload


class IssuedBearerToken(BaseModelConfig):
    """Compact credential together with the claims it encodes."""

    token: str
    claims: BearerClaims


class CodeState(str, Enum):
    """Lifecycle of an authorization code inside the exchange engine."""

    ISSUED = "issued"
    CONSUMED = "consumed"
    MINTED = "minted"
    FAILED = "failed"


class TokenExchange(BaseModelConfig):
    """Outcome of a successful code-for-token exchange."""

    bearer_token: str
    token_id: int
    scope: str
    expires_in: int

    @beartype
    def to_public(self) -> dict[str, Any]:
        """Serialize in the OAuth token response shape."""
        return {
            "access_token": self.bearer_token,
            "token_type": "Bearer",
            "expires_in": self.expires_in,
            "nft_token_id": str(self.token_id),
            "scope": self.scope,
        }


class AuthorizationGrant(BaseModelConfig):
    """Outcome of the authorize step."""

    code: str
    state: str | None
    redirect_uri: str

    @beartype
    def to_public(self) -> dict[str, Any]:
        """Serialize in the authorize response shape."""
        return {"code": self.code, "state": self.state, "redirectUri": self.redirect_uri}


class TokenVerification(BaseModelConfig):
    """Result of checking a bearer token locally and against the ledger."""

    valid: bool
    reason: str = "ok"
    claims: BearerClaims | None = None
    record: LedgerTokenRecord | None = None

    @beartype
    def to_public(self) -> dict[str, Any]:
        """Serialize in the verify response shape."""
        if not self.valid or self.claims is None or self.record is None:
            return {"valid": False}
        info = self.record.to_public()
        info.pop("tokenId")
        return {
            "valid": True,
            "userAddress": self.claims.subject_address,
            "clientId": self.claims.client_id,
            "scope": self.claims.scope,
            "tokenInfo": info,
        }
