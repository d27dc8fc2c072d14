# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Bearer token verification and revocation against live ledger state.

A bearer token is only as trustworthy as the more restrictive of its own
expiry and the ledger record it names: verification always re-reads the
ledger, so a revocation takes effect immediately for tokens that have not
yet expired locally.
"""

import asyncio
import time
from collections.abc import Callable

from beartype import beartype
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature as EthKeysBadSignature
from eth_keys.exceptions import ValidationError as EthKeysValidationError

from ..core.errors import (
    AuthError,
    AuthorizationError,
    BadSignature,
    GatewayError,
    OAuthNFTError,
    TokenInactive,
    Unauthorized,
)
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..ledger.base import LedgerGateway
from ..models.grant import LedgerTokenRecord, TokenVerification
from .codec import BearerTokenCodec

logger = get_logger(__name__)


@beartype
def revocation_message(token_id: int) -> str:
    """Text a subject signs to revoke a token by its ledger id."""
    return f"Revoke OAuth NFT token {token_id}"


class VerificationEngine:
    """Verify and revoke bearer tokens; list a subject's ledger records."""

    def __init__(
        self,
        ledger: LedgerGateway,
        codec: BearerTokenCodec,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ledger = ledger
        self._codec = codec
        self._clock = clock

    @beartype
    async def verify(self, token: str) -> Result[TokenVerification, OAuthNFTError]:
        """Decode a bearer token and cross-check its ledger record.

        Local decode failures and inactive records produce ``valid=False``;
        a ledger that cannot be reached produces an ``Err``.
        """
        try:
            claims = self._codec.decode(token)
        except AuthError as e:
            logger.info("Bearer token rejected locally: %s", e.description)
            return Ok(TokenVerification(valid=False, reason=e.reason))

        try:
            if not await self._ledger.is_valid(claims.token_id):
                return Ok(self._inactive(claims.token_id, "ledger reports invalid"))
            record = await self._ledger.get_record(claims.token_id)
        except GatewayError as e:
            logger.error("Ledger check for token %d failed: %s", claims.token_id, e.description)
            return Err(e)

        # A revoke may land between the two reads
        if not record.is_valid_at(self._clock()):
            return Ok(self._inactive(claims.token_id, "record no longer valid"))
        if (
            record.client_id != claims.client_id
            or record.subject_address.lower() != claims.subject_address.lower()
        ):
            return Ok(self._inactive(claims.token_id, "record does not match claims"))

        return Ok(TokenVerification(valid=True, claims=claims, record=record))

    def _inactive(self, token_id: int, detail: str) -> TokenVerification:
        logger.info("Token %d inactive: %s", token_id, detail)
        return TokenVerification(valid=False, reason=TokenInactive.reason)

    @beartype
    async def revoke(self, token: str) -> Result[int, OAuthNFTError]:
        """Revoke the ledger record behind a bearer token.

        The token must still decode: an expired bearer token cannot be used
        here, see :meth:`revoke_with_signature`. Revoking an already revoked
        record succeeds.
        """
        try:
            claims = self._codec.decode(token)
        except AuthError as e:
            logger.warning("Revocation refused: %s", e.description)
            return Err(e)

        try:
            operator = await self._ledger.operator_address()
            await self._ledger.revoke(claims.token_id, operator)
        except (GatewayError, AuthorizationError) as e:
            logger.error("Revocation of token %d failed: %s", claims.token_id, e.description)
            return Err(e)

        logger.info("Token %d revoked by bearer", claims.token_id)
        return Ok(claims.token_id)

    @beartype
    async def revoke_with_signature(
        self, token_id: int, user_address: str, signature: str
    ) -> Result[int, OAuthNFTError]:
        """Revoke a ledger record on the strength of its subject's wallet signature.

        Works for lapsed grants whose bearer token no longer decodes. The
        signature is an EIP-191 personal signature over
        :func:`revocation_message`.
        """
        message = encode_defunct(text=revocation_message(token_id))
        try:
            signer = Account.recover_message(message, signature=signature)
        except (ValueError, TypeError, EthKeysBadSignature, EthKeysValidationError) as e:
            logger.warning("Unrecoverable revocation signature for token %d: %s", token_id, e)
            return Err(BadSignature(f"Unrecoverable signature: {e}"))

        if signer.lower() != user_address.lower():
            return Err(Unauthorized(f"Signature by {signer}, claimed {user_address}"))

        try:
            record = await self._ledger.get_record(token_id)
            if record.subject_address.lower() != signer.lower():
                return Err(Unauthorized(f"{signer} does not own token {token_id}"))
            operator = await self._ledger.operator_address()
            await self._ledger.revoke(token_id, operator)
        except (GatewayError, AuthorizationError) as e:
            logger.error("Signed revocation of token %d failed: %s", token_id, e.description)
            return Err(e)

        logger.info("Token %d revoked by subject signature", token_id)
        return Ok(token_id)

    @beartype
    async def list_user_tokens(
        self, address: str
    ) -> Result[list[LedgerTokenRecord], OAuthNFTError]:
        """Return every ledger record minted to ``address``, revoked ones included."""
        try:
            token_ids = await self._ledger.list_user_tokens(address)
            records = await asyncio.gather(
                *(self._ledger.get_record(token_id) for token_id in token_ids)
            )
        except GatewayError as e:
            logger.error("Listing tokens of %s failed: %s", address, e.description)
            return Err(e)
        return Ok(list(records))
