# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Narrow capability interface to the external token ledger."""

from abc import ABC, abstractmethod

from ..models.grant import LedgerTokenRecord


class LedgerGateway(ABC):
    """Typed read/write interface to the NFT contract.

    Every call may take seconds and may fail on transport, resource
    exhaustion or contract rejection. Implementations raise the errors of
    :mod:`nft_oauth.core.errors`; they never retry.
    """

    @abstractmethod
    async def mint(
        self,
        subject: str,
        client_id: str,
        scope: str,
        expires_at: int,
        metadata_uri: str,
    ) -> int:
        """Commit a new immutable token record and return its id.

        Raises:
            ClientUnregistered: client id has no registered address.
            InvalidExpiry: ``expires_at`` is not strictly in the future.
            GatewayError: transport failure or timeout.
        """

    @abstractmethod
    async def is_valid(self, token_id: int) -> bool:
        """Return the derived validity of a record; False if never minted."""

    @abstractmethod
    async def get_record(self, token_id: int) -> LedgerTokenRecord:
        """Fetch a record.

        Raises:
            TokenNotFound: the id was never minted.
        """

    @abstractmethod
    async def revoke(self, token_id: int, requester: str) -> None:
        """Mark a record revoked. Re-revoking is a no-op.

        Raises:
            Unauthorized: requester is neither the subject nor the operator.
            TokenNotFound: the id was never minted.
        """

    @abstractmethod
    async def operator_address(self) -> str:
        """Identity allowed to revoke any record on behalf of the service."""

    @abstractmethod
    async def list_user_tokens(self, subject: str) -> list[int]:
        """Return the ids minted to ``subject`` in insertion order."""

    async def close(self) -> None:
        """Release transport resources."""
        return None
