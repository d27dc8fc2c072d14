# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Authorization-code-to-token exchange.

Per code, the exchange walks ``ISSUED -> CONSUMED -> MINTED`` or ends in
``FAILED``. The code is consumed before anything else is checked and is
never handed back, so a failed exchange (client mismatch, bad secret, mint
failure) forces the client to restart the authorization flow. The ledger
mint always completes before a bearer token is signed: no bearer token ever
names a token id the ledger has not assigned.
"""

import json
import time
from collections.abc import Callable
from urllib.parse import quote

from beartype import beartype

from ..core.config import Settings
from ..core.errors import (
    ClientMismatch,
    CodeNotFound,
    GatewayError,
    GrantError,
    InvalidGrant,
    MintFailed,
    OAuthNFTError,
    ValidationError,
)
from ..core.logging_utils import get_logger, redact
from ..core.result_types import Err, Ok, Result
from ..ledger.base import LedgerGateway
from ..models.grant import (
    AuthorizationGrant,
    AuthorizationRequest,
    CodeState,
    TokenExchange,
    TokenGrant,
)
from .clients import ClientRegistry
from .code_store import AuthorizationCodeStore
from .codec import BearerTokenCodec

logger = get_logger(__name__)

DEFAULT_SCOPE = "read"


@beartype
def token_metadata_uri(client_id: str, scope: str) -> str:
    """Inline JSON metadata document attached to a minted token."""
    document = json.dumps({"client": client_id, "scope": scope}, separators=(",", ":"))
    return f"data:application/json,{document}"


class ExchangeEngine:
    """Turns authorization codes into minted ledger records and bearer tokens."""

    def __init__(
        self,
        code_store: AuthorizationCodeStore,
        ledger: LedgerGateway,
        codec: BearerTokenCodec,
        clients: ClientRegistry,
        *,
        ledger_ttl_seconds: int = 3600,
        bearer_ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the exchange engine."""
        if bearer_ttl_seconds > ledger_ttl_seconds:
            raise ValueError("Bearer token lifetime must not exceed the ledger record lifetime")
        self._codes = code_store
        self._ledger = ledger
        self._codec = codec
        self._clients = clients
        self._ledger_ttl = ledger_ttl_seconds
        self._bearer_ttl = bearer_ttl_seconds
        self._clock = clock

    @classmethod
    @beartype
    def from_settings(
        cls,
        settings: Settings,
        code_store: AuthorizationCodeStore,
        ledger: LedgerGateway,
        codec: BearerTokenCodec,
        clients: ClientRegistry,
    ) -> "ExchangeEngine":
        return cls(
            code_store,
            ledger,
            codec,
            clients,
            ledger_ttl_seconds=settings.ledger_record_ttl_seconds,
            bearer_ttl_seconds=settings.bearer_token_ttl_seconds,
        )

    @beartype
    async def authorize(
        self,
        client_id: str | None,
        redirect_uri: str | None,
        user_address: str | None,
        scope: str | None = None,
        state: str | None = None,
    ) -> Result[AuthorizationGrant, OAuthNFTError]:
        """Record an approved grant request and issue its authorization code.

        Args:
            client_id: Client identifier
            redirect_uri: Where the client expects the code
            user_address: Wallet address of the approving subject
            scope: Space-separated scopes, ``read`` when omitted
            state: Opaque client state echoed back

        Returns:
            Result containing the code and the redirect URI carrying it
        """
        if not client_id or not redirect_uri or not user_address:
            return Err(ValidationError("authorize: clientId, redirectUri and userAddress are required"))

        request = AuthorizationRequest(
            client_id=client_id,
            redirect_uri=redirect_uri,
            scope=scope or DEFAULT_SCOPE,
            state=state,
            subject_address=user_address,
        )
        try:
            code = await self._codes.issue(request)
        except OAuthNFTError as e:
            logger.error("Authorization for client %s failed: %s", client_id, e.description)
            return Err(e)

        logger.info(
            "Authorization code %s %s for client %s, subject %s",
            redact(code),
            CodeState.ISSUED.value,
            client_id,
            user_address,
        )
        callback = f"{redirect_uri}?code={quote(code)}&state={quote(state or '')}"
        return Ok(AuthorizationGrant(code=code, state=state, redirect_uri=callback))

    @beartype
    async def exchange(
        self,
        code: str | None,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str | None,
    ) -> Result[TokenExchange, OAuthNFTError]:
        """Exchange an authorization code for a minted token and bearer token.

        Args:
            code: Authorization code from the authorize step
            client_id: Client identifier, must match the authorization request
            client_secret: Client secret, verified against the registry
            redirect_uri: Must match the authorization request byte-for-byte

        Returns:
            Result containing the bearer token and ledger token id
        """
        if not code or not client_id or not redirect_uri:
            return Err(ValidationError("token: code, clientId and redirectUri are required"))

        # ISSUED -> CONSUMED
        try:
            request = await self._codes.consume(code)
        except CodeNotFound as e:
            logger.warning("Rejected exchange for client %s: %s", client_id, e.description)
            return Err(InvalidGrant(e.description))
        except OAuthNFTError as e:
            logger.error("Code store failure during exchange: %s", e.description)
            return Err(e)
        logger.info("Authorization code %s %s", redact(code), CodeState.CONSUMED.value)

        try:
            self._check_client(request, client_id, client_secret, redirect_uri)
        except GrantError as e:
            self._fail(code, e)
            return Err(e)

        # CONSUMED -> MINTED
        now = self._clock()
        ledger_expires_at = int(now) + self._ledger_ttl
        try:
            token_id = await self._ledger.mint(
                request.subject_address,
                request.client_id,
                request.scope,
                ledger_expires_at,
                token_metadata_uri(request.client_id, request.scope),
            )
        except GatewayError as e:
            failure = MintFailed(f"Mint for client {client_id} failed: {e.description}")
            self._fail(code, failure)
            return Err(failure)

        # The bearer token never outlives its ledger record
        bearer_ttl = min(self._bearer_ttl, ledger_expires_at - int(now))
        issued = self._codec.issue(
            TokenGrant(
                token_id=token_id,
                subject_address=request.subject_address,
                client_id=request.client_id,
                scope=request.scope,
            ),
            bearer_ttl,
        )
        logger.info(
            "Authorization code %s %s as token %d for client %s",
            redact(code),
            CodeState.MINTED.value,
            token_id,
            client_id,
        )
        return Ok(
            TokenExchange(
                bearer_token=issued.token,
                token_id=token_id,
                scope=request.scope,
                expires_in=bearer_ttl,
            )
        )

    def _check_client(
        self,
        request: AuthorizationRequest,
        client_id: str,
        client_secret: str | None,
        redirect_uri: str,
    ) -> None:
        if request.client_id != client_id or request.redirect_uri != redirect_uri:
            raise ClientMismatch(
                f"Grant issued to {request.client_id} at {request.redirect_uri}, "
                f"presented by {client_id} at {redirect_uri}"
            )
        self._clients.authenticate(client_id, client_secret)

    def _fail(self, code: str, error: OAuthNFTError) -> None:
        logger.warning(
            "Authorization code %s %s: %s",
            redact(code),
            CodeState.FAILED.value,
            error.description,
        )
