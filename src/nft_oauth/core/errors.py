# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Error taxonomy shared by every layer of the service.

Each error carries the OAuth ``error`` code, the HTTP status it surfaces as,
and a short public message. The constructor argument is the internal
description: it is logged, never returned to callers.
"""

from typing import Any, ClassVar

from beartype import beartype


class OAuthNFTError(Exception):
    """Base class for all service errors."""

    error: ClassVar[str] = "server_error"
    status_code: ClassVar[int] = 500
    public_message: ClassVar[str] = "Internal error"

    def __init__(self, description: str | None = None) -> None:
        """Initialize with an internal description."""
        self.description = description or self.public_message
        super().__init__(self.description)

    @beartype
    def to_dict(self) -> dict[str, Any]:
        """Convert to the public error payload."""
        return {"error": self.public_message, "error_code": self.error}


# Request validation


class ValidationError(OAuthNFTError):
    """Missing or malformed request fields."""

    error = "invalid_request"
    status_code = 400
    public_message = "Missing required parameters"


# Grant errors


class GrantError(OAuthNFTError):
    """Invalid, expired or reused authorization grant."""

    error = "invalid_grant"
    status_code = 400
    public_message = "Invalid authorization grant"


class CodeNotFound(GrantError):
    """Authorization code unknown, expired or already consumed."""

    public_message = "Invalid authorization code"


class InvalidGrant(GrantError):
    """Exchange attempted with an unusable authorization code."""

    public_message = "Invalid authorization code"


class ClientMismatch(GrantError):
    """Client id or redirect URI differ from the authorization request."""

    public_message = "Client mismatch"


class InvalidClient(GrantError):
    """Client unknown or client secret wrong."""

    error = "invalid_client"
    public_message = "Invalid client credentials"


# Ledger gateway errors


class GatewayError(OAuthNFTError):
    """Ledger unreachable, reverted or timed out."""

    public_message = "Ledger request failed"


class GatewayTimeout(GatewayError):
    """Ledger call exceeded its time budget."""

    public_message = "Ledger request timed out"


class MintFailed(GatewayError):
    """Minting the token record failed; the authorization code is spent."""

    public_message = "Token generation failed"


class LedgerRevert(GatewayError):
    """Contract-level rejection of a ledger call."""


class ClientUnregistered(LedgerRevert):
    """Client id has no registered address on the ledger."""


class InvalidExpiry(LedgerRevert):
    """Requested record expiry is not strictly in the future."""


class TokenNotFound(LedgerRevert):
    """Token id was never minted."""

    public_message = "Token not found"


class InvalidAddress(LedgerRevert):
    """Address argument is not a 20-byte hex address."""


# Bearer token errors


class AuthError(OAuthNFTError):
    """Bearer token cannot be trusted."""

    error = "invalid_token"
    status_code = 401
    public_message = "Invalid token"
    reason: ClassVar[str] = "invalid_token"


class MalformedToken(AuthError):
    """Bearer token cannot be parsed."""

    reason = "malformed_token"


class BadSignature(AuthError):
    """Bearer token signature does not verify."""

    reason = "bad_signature"


class TokenExpired(AuthError):
    """Bearer token is past its own expiry."""

    reason = "token_expired"


class TokenInactive(AuthError):
    """Ledger record behind the bearer token is revoked or expired."""

    reason = "token_inactive"
    public_message = "Token is invalid or expired"


# Authorization errors


class AuthorizationError(OAuthNFTError):
    """Caller is not permitted to perform the operation."""

    error = "access_denied"
    status_code = 403
    public_message = "Not authorized"


class Unauthorized(AuthorizationError):
    """Requester is neither the record subject nor the ledger operator."""


__all__ = [
    "OAuthNFTError",
    "ValidationError",
    "GrantError",
    "CodeNotFound",
    "InvalidGrant",
    "ClientMismatch",
    "InvalidClient",
    "GatewayError",
    "GatewayTimeout",
    "MintFailed",
    "LedgerRevert",
    "ClientUnregistered",
    "InvalidExpiry",
    "TokenNotFound",
    "InvalidAddress",
    "AuthError",
    "MalformedToken",
    "BadSignature",
    "TokenExpired",
    "TokenInactive",
    "AuthorizationError",
    "Unauthorized",
]
