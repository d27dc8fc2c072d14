# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Signed bearer token encoding and decoding.

Bearer tokens are compact JWS (JWT) strings signed with a process-wide
symmetric secret. The signature covers every claim. Decoding is a purely
local check and never consults the ledger.
"""

import json
import re
import time
from collections.abc import Callable

from beartype import beartype
from jose import jws, jwt  # type: ignore[import-untyped]
from jose.exceptions import JWSError  # type: ignore[import-untyped]
from pydantic import SecretStr
from pydantic import ValidationError as PydanticValidationError

from ..core.config import Settings
from ..core.errors import BadSignature, MalformedToken, TokenExpired
from ..models.grant import BearerClaims, IssuedBearerToken, TokenGrant

_SEGMENT = r"[A-Za-z0-9_-]+"
_COMPACT_JWS = re.compile(rf"^{_SEGMENT}\.{_SEGMENT}\.{_SEGMENT}$")


class BearerTokenCodec:
    """Issue and decode HMAC-signed bearer tokens."""

    def __init__(
        self,
        secret: SecretStr,
        *,
        algorithm: str = "HS256",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock

    def __repr__(self) -> str:
        return f"BearerTokenCodec(algorithm={self._algorithm!r})"

    @classmethod
    @beartype
    def from_settings(cls, settings: Settings) -> "BearerTokenCodec":
        return cls(settings.jwt_secret, algorithm=settings.jwt_algorithm)

    @beartype
    def issue(self, grant: TokenGrant, ttl_seconds: int) -> IssuedBearerToken:
        """Sign ``grant`` into a token that expires ``ttl_seconds`` from now."""
        issued_at = int(self._clock())
        claims = BearerClaims(
            token_id=grant.token_id,
            subject_address=grant.subject_address,
            client_id=grant.client_id,
            scope=grant.scope,
            issued_at=issued_at,
            expires_at=issued_at + ttl_seconds,
        )
        token = jwt.encode(
            claims.to_payload(),
            self._secret.get_secret_value(),
            algorithm=self._algorithm,
        )
        return IssuedBearerToken(token=token, claims=claims)

    @beartype
    def decode(self, token: str) -> BearerClaims:
        """Verify and decode a bearer token.

        Raises:
            MalformedToken: not a compact JWS, segments that do not decode, or
                unusable signed claims.
            BadSignature: the signature does not verify under the secret.
            TokenExpired: the token's own expiry has passed.
        """
        if not _COMPACT_JWS.match(token):
            raise MalformedToken("Token is not a compact JWS")

        # Segments must decode before the signature is worth checking
        try:
            jws.get_unverified_header(token)
        except JWSError as e:
            raise MalformedToken(f"Undecodable token segments: {e}") from e

        try:
            payload = jws.verify(
                token, self._secret.get_secret_value(), algorithms=[self._algorithm]
            )
        except JWSError as e:
            raise BadSignature(f"Signature verification failed: {e}") from e

        try:
            claims = BearerClaims.model_validate(json.loads(payload))
        except (ValueError, PydanticValidationError) as e:
            raise MalformedToken(f"Unusable token claims: {e}") from e

        now = self._clock()
        if now > claims.expires_at:
            raise TokenExpired(f"Token expired at {claims.expires_at}, now {int(now)}")
        return claims
