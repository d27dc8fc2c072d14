# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""HTTP surface."""

from .health import router as health_router
from .oauth import router as oauth_router

__all__ = ["health_router", "oauth_router"]
