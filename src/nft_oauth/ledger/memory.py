# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""In-process ledger with the semantics of the OAuth NFT contract."""

import asyncio
import time
from collections.abc import Callable

from attrs import field, frozen
from beartype import beartype

from ..core.errors import (
    ClientUnregistered,
    InvalidExpiry,
    LedgerRevert,
    TokenNotFound,
    Unauthorized,
)
from ..core.logging_utils import get_logger
from ..models.grant import LedgerTokenRecord
from .base import LedgerGateway

logger = get_logger(__name__)


@frozen
class LedgerEvent:
    """Event emitted by a state-changing ledger call."""

    name: str = field()
    token_id: int = field()
    subject: str = field(default="")
    client_id: str = field(default="")


class InMemoryLedger(LedgerGateway):
    """Ledger kept in process memory.

    Token ids start at 1 and increase monotonically. Mutations are
    serialized with a lock, mirroring the ledger's own ordering of
    state-changing transactions.
    """

    def __init__(
        self,
        operator: str,
        *,
        clients: dict[str, str] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._operator = operator.lower()
        self._clock = clock
        self._clients: dict[str, str] = {}
        self._records: dict[int, LedgerTokenRecord] = {}
        self._owners: dict[str, list[int]] = {}
        self._token_uris: dict[int, str] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()
        self.events: list[LedgerEvent] = []
        for client_id, address in (clients or {}).items():
            self.register_client(client_id, address)

    async def operator_address(self) -> str:
        return self._operator

    @beartype
    def register_client(self, client_id: str, address: str) -> None:
        """Register a client address; a client id can be registered once."""
        if client_id in self._clients:
            raise LedgerRevert("Client already registered")
        self._clients[client_id] = address
        logger.info("Registered client %s -> %s", client_id, address)

    @beartype
    def client_address(self, client_id: str) -> str | None:
        return self._clients.get(client_id)

    @beartype
    def token_uri(self, token_id: int) -> str:
        if token_id not in self._token_uris:
            raise TokenNotFound(f"Token {token_id} does not exist")
        return self._token_uris[token_id]

    @beartype
    async def mint(
        self,
        subject: str,
        client_id: str,
        scope: str,
        expires_at: int,
        metadata_uri: str,
    ) -> int:
        async with self._lock:
            if client_id not in self._clients:
                raise ClientUnregistered(f"Client not registered: {client_id}")
            if expires_at <= self._clock():
                raise InvalidExpiry(f"Invalid expiration time: {expires_at}")

            token_id = self._next_id
            self._next_id += 1
            self._records[token_id] = LedgerTokenRecord(
                token_id=token_id,
                subject_address=subject,
                client_id=client_id,
                scope=scope,
                expires_at=expires_at,
                revoked=False,
            )
            self._owners.setdefault(subject.lower(), []).append(token_id)
            self._token_uris[token_id] = metadata_uri
            self.events.append(
                LedgerEvent("TokenMinted", token_id, subject=subject, client_id=client_id)
            )
        logger.info("Minted token %d for %s (client %s)", token_id, subject, client_id)
        return token_id

    @beartype
    async def is_valid(self, token_id: int) -> bool:
        record = self._records.get(token_id)
        if record is None:
            return False
        return record.is_valid_at(self._clock())

    @beartype
    async def get_record(self, token_id: int) -> LedgerTokenRecord:
        record = self._records.get(token_id)
        if record is None:
            raise TokenNotFound(f"Token {token_id} does not exist")
        return record

    @beartype
    async def revoke(self, token_id: int, requester: str) -> None:
        async with self._lock:
            record = self._records.get(token_id)
            if record is None:
                raise TokenNotFound(f"Token {token_id} does not exist")
            if requester.lower() not in (record.subject_address.lower(), self._operator):
                raise Unauthorized(f"{requester} may not revoke token {token_id}")
            if record.revoked:
                logger.debug("Token %d already revoked", token_id)
                return
            self._records[token_id] = record.model_copy(update={"revoked": True})
            self.events.append(LedgerEvent("TokenRevoked", token_id))
        logger.info("Revoked token %d (requested by %s)", token_id, requester)

    @beartype
    async def list_user_tokens(self, subject: str) -> list[int]:
        return list(self._owners.get(subject.lower(), []))
