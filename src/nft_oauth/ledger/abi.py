# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""ABI fragments of the OAuth NFT contract used by the web3 gateway."""

from typing import Any, Final


def _fn(
    name: str,
    inputs: list[tuple[str, str]],
    outputs: list[dict[str, Any]],
    mutability: str,
) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": outputs,
        "stateMutability": mutability,
    }


TOKEN_INFO_COMPONENTS: Final = [
    {"name": "user", "type": "address"},
    {"name": "clientId", "type": "string"},
    {"name": "scope", "type": "string"},
    {"name": "expiresAt", "type": "uint256"},
    {"name": "revoked", "type": "bool"},
]

OAUTH_NFT_ABI: Final[list[dict[str, Any]]] = [
    _fn(
        "mintAuthToken",
        [
            ("user", "address"),
            ("clientId", "string"),
            ("scope", "string"),
            ("expiresAt", "uint256"),
            ("tokenURI", "string"),
        ],
        [{"name": "", "type": "uint256"}],
        "nonpayable",
    ),
    _fn("isTokenValid", [("tokenId", "uint256")], [{"name": "", "type": "bool"}], "view"),
    _fn(
        "getTokenInfo",
        [("tokenId", "uint256")],
        [{"name": "", "type": "tuple", "components": TOKEN_INFO_COMPONENTS}],
        "view",
    ),
    _fn("revokeToken", [("tokenId", "uint256")], [], "nonpayable"),
    _fn(
        "getUserTokens",
        [("user", "address")],
        [{"name": "", "type": "uint256[]"}],
        "view",
    ),
    _fn(
        "clientRegistry",
        [("clientId", "string")],
        [{"name": "", "type": "address"}],
        "view",
    ),
    # ERC-721 mint event; the minted id is the third indexed topic
    {
        "type": "event",
        "name": "Transfer",
        "anonymous": False,
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "tokenId", "type": "uint256", "indexed": True},
        ],
    },
]

ZERO_ADDRESS: Final = "0x0000000000000000000000000000000000000000"
