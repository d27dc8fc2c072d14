# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Ledger gateway implementations."""

from beartype import beartype

from ..core.config import Settings
from .base import LedgerGateway
from .memory import InMemoryLedger, LedgerEvent
from .web3_gateway import Web3LedgerGateway

# Operator identity of the in-process ledger (first hardhat development account)
DEV_OPERATOR_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@beartype
def create_ledger_from_settings(settings: Settings) -> LedgerGateway:
    """Create the contract-backed gateway if configured, otherwise in-memory."""
    if settings.ledger_backend == "web3":
        return Web3LedgerGateway.from_settings(settings)
    operator = settings.ledger_operator_address or DEV_OPERATOR_ADDRESS
    # Development ledgers register every configured client to the operator
    return InMemoryLedger(
        operator,
        clients={client_id: operator for client_id in settings.oauth_clients},
    )


__all__ = [
    "LedgerGateway",
    "InMemoryLedger",
    "LedgerEvent",
    "Web3LedgerGateway",
    "create_ledger_from_settings",
    "DEV_OPERATOR_ADDRESS",
]
