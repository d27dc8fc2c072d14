# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Authorization code exchange, bearer tokens and verification."""

from .clients import ClientRegistry
from .code_store import (
    AuthorizationCodeStore,
    InMemoryAuthorizationCodeStore,
    RedisAuthorizationCodeStore,
    create_code_store_from_settings,
)
from .codec import BearerTokenCodec
from .exchange import ExchangeEngine
from .verification import VerificationEngine, revocation_message

__all__ = [
    "AuthorizationCodeStore",
    "BearerTokenCodec",
    "ClientRegistry",
    "ExchangeEngine",
    "InMemoryAuthorizationCodeStore",
    "RedisAuthorizationCodeStore",
    "VerificationEngine",
    "create_code_store_from_settings",
    "revocation_message",
]
