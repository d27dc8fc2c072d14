"""Shared test doubles and constants."""

from nft_oauth.core.errors import GatewayError
from nft_oauth.ledger import InMemoryLedger

OPERATOR = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
CLIENT_ID = "client_001"
CLIENT_SECRET = "client_001_secret"
REDIRECT_URI = "http://cb"
SUBJECT = "0xUSER"
TEST_SECRET = "unit-test-signing-secret-with-at-least-32-characters"


class FakeClock:
    """Manually advanced clock returning unix seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingLedger(InMemoryLedger):
    """In-memory ledger that counts mint calls."""

    def __init__(self, *args: object, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        self.mint_calls = 0

    async def mint(
        self,
        subject: str,
        client_id: str,
        scope: str,
        expires_at: int,
        metadata_uri: str,
    ) -> int:
        self.mint_calls += 1
        return await super().mint(subject, client_id, scope, expires_at, metadata_uri)


class UnreachableLedger(CountingLedger):
    """Ledger whose every call fails as if the node were down."""

    async def mint(self, *args: object, **kwargs: object) -> int:
        self.mint_calls += 1
        raise GatewayError("connection refused")

    async def is_valid(self, token_id: int) -> bool:
        raise GatewayError("connection refused")

    async def list_user_tokens(self, subject: str) -> list[int]:
        raise GatewayError("connection refused")
