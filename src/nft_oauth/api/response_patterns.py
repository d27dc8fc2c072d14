# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Error responses for the HTTP surface.

Engines return ``Result`` values whose error side is an
:class:`~nft_oauth.core.errors.OAuthNFTError`; this module turns them into
JSON responses. Only the public message and the OAuth error code leave the
process, the internal description stays in the log.
"""

from typing import Any

from beartype import beartype
from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import OAuthNFTError


class ErrorResponse(BaseModel):
    """Standardized error body."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        validate_default=True,
    )

    error: str = Field(..., description="Human-readable error message")
    error_code: str | None = Field(default=None, description="Machine-readable error code")


class APIResponseHandler:
    """Maps engine errors onto HTTP status codes and bodies."""

    @staticmethod
    @beartype
    def error(
        error: OAuthNFTError,
        *,
        status_code: int | None = None,
        message: str | None = None,
    ) -> JSONResponse:
        """Render an engine error.

        Args:
            error: Error returned by an engine
            status_code: Overrides the status carried by the error
            message: Overrides the public message carried by the error

        Returns:
            JSON response with an :class:`ErrorResponse` body
        """
        body = ErrorResponse(
            error=message or error.public_message,
            error_code=error.error,
        )
        return JSONResponse(
            status_code=status_code or error.status_code,
            content=body.model_dump(),
        )

    @staticmethod
    @beartype
    def message(
        message: str, *, status_code: int = status.HTTP_400_BAD_REQUEST
    ) -> JSONResponse:
        """Render a bare error message."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(error=message).model_dump(exclude_none=True),
        )

    @staticmethod
    @beartype
    def ok(payload: dict[str, Any]) -> JSONResponse:
        """Render a success body."""
        return JSONResponse(status_code=status.HTTP_200_OK, content=payload)
