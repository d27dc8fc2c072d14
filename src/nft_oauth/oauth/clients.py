# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Registered OAuth client credentials."""

from beartype import beartype
from passlib.context import CryptContext

from ..core.config import Settings
from ..core.errors import InvalidClient
from ..core.logging_utils import get_logger

logger = get_logger(__name__)

# Client secret hashing
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


class ClientRegistry:
    """Client secret hashes keyed by client id."""

    def __init__(self, secret_hashes: dict[str, str] | None = None) -> None:
        self._hashes: dict[str, str] = dict(secret_hashes or {})

    @classmethod
    @beartype
    def from_settings(cls, settings: Settings) -> "ClientRegistry":
        """Build from configuration, hashing any plaintext secrets once."""
        registry = cls()
        for client_id, secret in settings.oauth_clients.items():
            registry.register(client_id, secret)
        logger.info("Loaded %d OAuth client(s)", len(registry))
        return registry

    def __len__(self) -> int:
        return len(self._hashes)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._hashes

    @beartype
    def register(self, client_id: str, secret: str) -> None:
        """Register a client from a plaintext secret or an existing hash."""
        if pwd_context.identify(secret) is None:
            secret = pwd_context.hash(secret)
        self._hashes[client_id] = secret

    @beartype
    def authenticate(self, client_id: str, client_secret: str | None) -> None:
        """Check a client secret.

        Raises:
            InvalidClient: unknown client, missing or wrong secret.
        """
        secret_hash = self._hashes.get(client_id)
        if secret_hash is None:
            raise InvalidClient(f"Unknown client {client_id}")
        if not client_secret or not pwd_context.verify(client_secret, secret_hash):
            raise InvalidClient(f"Bad secret for client {client_id}")
