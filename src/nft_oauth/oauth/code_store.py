# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Short-lived, single-use authorization code storage.

A code maps to the pending :class:`AuthorizationRequest` it was issued for.
Every code disappears after a fixed TTL whether or not it was used, and
``consume`` is an atomic retrieve-and-delete: of any number of concurrent
callers presenting the same code, at most one gets the request back.
"""

import asyncio
import secrets
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

import redis.asyncio as redis
from beartype import beartype
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..core.config import Settings
from ..core.errors import CodeNotFound, OAuthNFTError
from ..core.logging_utils import get_logger, redact
from ..models.grant import AuthorizationRequest

logger = get_logger(__name__)

CODE_BYTES = 32  # 256 bits of entropy
_MAX_ISSUE_ATTEMPTS = 3


@beartype
def generate_code() -> str:
    """Return an unguessable authorization code."""
    return secrets.token_urlsafe(CODE_BYTES)


class AuthorizationCodeStore(ABC):
    """Abstract store for pending authorization requests."""

    def __init__(self, ttl_seconds: int = 600) -> None:
        self.ttl_seconds = ttl_seconds

    @abstractmethod
    async def issue(self, request: AuthorizationRequest) -> str:
        """Store a request under a fresh code and return the code."""

    @abstractmethod
    async def consume(self, code: str) -> AuthorizationRequest:
        """Atomically fetch and delete the request stored under ``code``.

        Raises:
            CodeNotFound: unknown, expired or already consumed code.
        """

    async def connect(self) -> None:
        """Open backend connections."""
        return None

    async def disconnect(self) -> None:
        """Close backend connections."""
        return None


class InMemoryAuthorizationCodeStore(AuthorizationCodeStore):
    """Process-local code store.

    Expired codes are evicted by a timer on the running event loop and are
    also rejected on ``consume`` against the store clock, so a missed timer
    never extends a code's life.
    """

    def __init__(
        self,
        ttl_seconds: int = 600,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(ttl_seconds)
        self._clock = clock
        self._entries: dict[str, tuple[AuthorizationRequest, float]] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    @beartype
    async def issue(self, request: AuthorizationRequest) -> str:
        async with self._lock:
            code = generate_code()
            while code in self._entries:
                code = generate_code()
            self._entries[code] = (request, self._clock() + self.ttl_seconds)
        asyncio.get_running_loop().call_later(self.ttl_seconds, self._evict, code)
        logger.debug("Issued authorization code %s", redact(code))
        return code

    @beartype
    async def consume(self, code: str) -> AuthorizationRequest:
        async with self._lock:
            entry = self._entries.pop(code, None)
        if entry is None:
            raise CodeNotFound(f"Unknown or already used code {redact(code)}")
        request, deadline = entry
        if self._clock() >= deadline:
            raise CodeNotFound(f"Expired code {redact(code)}")
        return request

    def _evict(self, code: str) -> None:
        if self._entries.pop(code, None) is not None:
            logger.debug("Evicted unused authorization code %s", redact(code))


class RedisAuthorizationCodeStore(AuthorizationCodeStore):
    """Redis-backed code store for horizontally scaled deployments.

    Codes are written with ``SET NX EX`` and consumed with ``GETDEL``, so
    expiry and the single-use guarantee hold across processes.
    """

    def __init__(
        self,
        redis_client: Redis | None = None,
        *,
        url: str = "redis://localhost:6379/0",
        ttl_seconds: int = 600,
        key_prefix: str = "auth_code:",
    ) -> None:
        super().__init__(ttl_seconds)
        self._redis: Redis | None = redis_client
        self._url = url
        self._prefix = key_prefix

    async def connect(self) -> None:
        """Create the Redis client unless one was supplied."""
        if self._redis is not None:
            return
        self._redis = redis.from_url(self._url, decode_responses=True)

    async def disconnect(self) -> None:
        """Close the Redis client."""
        if self._redis is None:
            return
        await self._redis.aclose()
        self._redis = None

    def _client(self) -> Redis:
        if self._redis is None:
            raise RuntimeError("Code store not connected")
        return self._redis

    @beartype
    async def issue(self, request: AuthorizationRequest) -> str:
        client = self._client()
        payload = request.model_dump_json()
        try:
            for _ in range(_MAX_ISSUE_ATTEMPTS):
                code = generate_code()
                if await client.set(
                    f"{self._prefix}{code}", payload, ex=self.ttl_seconds, nx=True
                ):
                    logger.debug("Issued authorization code %s", redact(code))
                    return code
        except RedisError as e:
            logger.error("Code store write failed: %s", e)
            raise OAuthNFTError(f"Code store unavailable: {e}") from e
        raise OAuthNFTError("Could not allocate a unique authorization code")

    @beartype
    async def consume(self, code: str) -> AuthorizationRequest:
        try:
            raw = await self._client().getdel(f"{self._prefix}{code}")
        except RedisError as e:
            logger.error("Code store read failed: %s", e)
            raise OAuthNFTError(f"Code store unavailable: {e}") from e
        if raw is None:
            raise CodeNotFound(f"Unknown, expired or used code {redact(code)}")
        return AuthorizationRequest.model_validate_json(raw)


@beartype
def create_code_store_from_settings(settings: Settings) -> AuthorizationCodeStore:
    """Create the Redis store if configured, otherwise in-memory."""
    if settings.code_store_backend == "redis":
        return RedisAuthorizationCodeStore(
            url=settings.redis_url,
            ttl_seconds=settings.authorization_code_ttl_seconds,
        )
    return InMemoryAuthorizationCodeStore(settings.authorization_code_ttl_seconds)
