# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""NFT-backed OAuth2 token service.

Authorization grants are minted as NFTs on a ledger and handed to clients as
signed bearer tokens that are cross-checked against live ledger state.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
