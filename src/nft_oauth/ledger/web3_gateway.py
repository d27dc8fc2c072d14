# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Contract-backed ledger gateway over JSON-RPC."""

import asyncio
from collections.abc import Awaitable
from typing import Any, TypeVar

import aiohttp
from beartype import beartype
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception
from web3.logs import DISCARD

from ..core.config import Settings
from ..core.errors import (
    ClientUnregistered,
    GatewayError,
    GatewayTimeout,
    InvalidAddress,
    InvalidExpiry,
    LedgerRevert,
    TokenNotFound,
    Unauthorized,
)
from ..core.logging_utils import get_logger
from ..models.grant import LedgerTokenRecord
from .abi import OAUTH_NFT_ABI, ZERO_ADDRESS
from .base import LedgerGateway

logger = get_logger(__name__)

T = TypeVar("T")

# Revert reason fragments emitted by the contract
_REVERT_ERRORS: tuple[tuple[str, type[Exception]], ...] = (
    ("client not registered", ClientUnregistered),
    ("invalid expiration", InvalidExpiry),
    ("does not exist", TokenNotFound),
    ("nonexistent token", TokenNotFound),
    ("not authorized", Unauthorized),
)


@beartype
def map_revert(operation: str, exc: ContractLogicError) -> Exception:
    """Translate a contract revert into the service error taxonomy."""
    reason = str(getattr(exc, "message", None) or exc).lower()
    for fragment, error_type in _REVERT_ERRORS:
        if fragment in reason:
            return error_type(f"{operation} reverted: {reason}")
    return LedgerRevert(f"{operation} reverted: {reason}")


class Web3LedgerGateway(LedgerGateway):
    """Ledger gateway talking to the deployed OAuth NFT contract.

    State-changing calls are sent from node-managed accounts (the operator
    for mints, the requester for revokes) and return once the receipt is
    confirmed; reads observe whatever state the node has committed.
    """

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        *,
        operator: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self._contract = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(contract_address),
            abi=OAUTH_NFT_ABI,
        )
        self._operator = AsyncWeb3.to_checksum_address(operator) if operator else None
        self._timeout = timeout_seconds

    @classmethod
    @beartype
    def from_settings(cls, settings: Settings) -> "Web3LedgerGateway":
        if settings.contract_address is None:
            raise ValueError("contract_address is required for the web3 ledger backend")
        return cls(
            settings.ledger_rpc_url,
            settings.contract_address,
            operator=settings.ledger_operator_address,
            timeout_seconds=settings.ledger_timeout_seconds,
        )

    async def _bounded(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Await a ledger call within the configured time budget."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except (asyncio.TimeoutError, TimeExhausted) as e:
            logger.error("Ledger %s timed out after %.1fs", operation, self._timeout)
            raise GatewayTimeout(f"{operation} timed out") from e
        except ContractLogicError as e:
            logger.warning("Ledger %s reverted: %s", operation, e)
            raise map_revert(operation, e) from e
        except Web3Exception as e:
            logger.error("Ledger %s failed: %s", operation, e)
            raise GatewayError(f"{operation} failed: {e}") from e
        except (aiohttp.ClientError, OSError) as e:
            logger.error("Ledger %s transport error: %s", operation, e)
            raise GatewayError(f"{operation} transport error: {e}") from e

    @staticmethod
    def _checksum(operation: str, address: str) -> str:
        try:
            return AsyncWeb3.to_checksum_address(address)
        except (ValueError, TypeError) as e:
            raise InvalidAddress(f"{operation}: invalid address {address!r}") from e

    def _function(self, operation: str, name: str, *args: Any) -> Any:
        """Bind contract function ``name`` to ``args`` without touching the node."""
        try:
            return getattr(self._contract.functions, name)(*args)
        except (Web3Exception, ValueError, TypeError) as e:
            raise LedgerRevert(f"{operation} arguments rejected: {e}") from e

    async def operator_address(self) -> str:
        if self._operator is None:
            accounts = await self._bounded("accounts", self._w3.eth.accounts)
            if not accounts:
                raise GatewayError("Ledger node exposes no operator account")
            self._operator = accounts[0]
        return self._operator

    async def _transact(self, operation: str, call: Any, sender: str) -> Any:
        tx_hash = await self._bounded(operation, call.transact({"from": sender}))
        receipt = await self._bounded(
            operation,
            self._w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._timeout),
        )
        if receipt["status"] != 1:
            raise LedgerRevert(f"{operation} transaction {tx_hash.hex()} failed")
        return receipt

    @beartype
    async def mint(
        self,
        subject: str,
        client_id: str,
        scope: str,
        expires_at: int,
        metadata_uri: str,
    ) -> int:
        operator = await self.operator_address()
        call = self._function(
            "mint",
            "mintAuthToken",
            self._checksum("mint", subject),
            client_id,
            scope,
            expires_at,
            metadata_uri,
        )
        receipt = await self._transact("mint", call, operator)
        for event in self._contract.events.Transfer().process_receipt(
            receipt, errors=DISCARD
        ):
            if event["args"]["from"] == ZERO_ADDRESS:
                token_id = int(event["args"]["tokenId"])
                logger.info("Minted token %d for %s (client %s)", token_id, subject, client_id)
                return token_id
        raise GatewayError("mint receipt carries no Transfer event")

    @beartype
    async def is_valid(self, token_id: int) -> bool:
        try:
            return bool(
                await self._bounded(
                    "is_valid", self._function("is_valid", "isTokenValid", token_id).call()
                )
            )
        except LedgerRevert:
            return False

    @beartype
    async def get_record(self, token_id: int) -> LedgerTokenRecord:
        user, client_id, scope, expires_at, revoked = await self._bounded(
            "get_record", self._function("get_record", "getTokenInfo", token_id).call()
        )
        if user == ZERO_ADDRESS:
            raise TokenNotFound(f"Token {token_id} does not exist")
        return LedgerTokenRecord(
            token_id=token_id,
            subject_address=user,
            client_id=client_id,
            scope=scope,
            expires_at=int(expires_at),
            revoked=bool(revoked),
        )

    @beartype
    async def revoke(self, token_id: int, requester: str) -> None:
        sender = self._checksum("revoke", requester)
        call = self._function("revoke", "revokeToken", token_id)
        await self._transact("revoke", call, sender)
        logger.info("Revoked token %d (requested by %s)", token_id, requester)

    @beartype
    async def list_user_tokens(self, subject: str) -> list[int]:
        ids = await self._bounded(
            "list_user_tokens",
            self._function(
                "list_user_tokens",
                "getUserTokens",
                self._checksum("list_user_tokens", subject),
            ).call(),
        )
        return [int(token_id) for token_id in ids]

    async def close(self) -> None:
        provider = self._w3.provider
        disconnect = getattr(provider, "disconnect", None)
        if callable(disconnect):
            await disconnect()
