# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Domain models."""

from .grant import (
    AuthorizationGrant,
    AuthorizationRequest,
    BearerClaims,
    CodeState,
    IssuedBearerToken,
    LedgerTokenRecord,
    TokenExchange,
    TokenGrant,
    TokenVerification,
)

__all__ = [
    "AuthorizationGrant",
    "AuthorizationRequest",
    "BearerClaims",
    "CodeState",
    "IssuedBearerToken",
    "LedgerTokenRecord",
    "TokenExchange",
    "TokenGrant",
    "TokenVerification",
]
