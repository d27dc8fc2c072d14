# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Base Pydantic model configuration for all domain models.

Domain values are immutable and reject unknown fields. Strings are kept
verbatim (no whitespace stripping) because redirect URIs and client ids are
compared byte-for-byte.
"""

from pydantic import BaseModel, ConfigDict


class BaseModelConfig(BaseModel):
    """Base model with strict configuration for all domain entities."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        validate_default=True,
        populate_by_name=True,
    )
