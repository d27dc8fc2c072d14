"""Test configuration and fixtures.

Every time-dependent component takes an injected clock; tests share one
:class:`FakeClock` so expiry is exercised by advancing it, never by sleeping.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from nft_oauth.core.config import Settings, clear_settings_cache
from nft_oauth.main import create_app
from nft_oauth.oauth import (
    BearerTokenCodec,
    ClientRegistry,
    ExchangeEngine,
    InMemoryAuthorizationCodeStore,
    VerificationEngine,
)
from tests.fixtures.doubles import (
    CLIENT_ID,
    CLIENT_SECRET,
    OPERATOR,
    TEST_SECRET,
    CountingLedger,
    FakeClock,
)


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> Generator[None, None, None]:
    """Keep cached settings from leaking between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def clock() -> FakeClock:
    """Shared fake clock."""
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Development settings with in-memory backends."""
    return Settings(
        api_env="development",
        jwt_secret=SecretStr(TEST_SECRET),
        code_store_backend="memory",
        ledger_backend="memory",
        oauth_clients={CLIENT_ID: CLIENT_SECRET},
    )


@pytest.fixture
def ledger(clock: FakeClock) -> CountingLedger:
    """Ledger with ``client_001`` registered to the operator."""
    return CountingLedger(OPERATOR, clients={CLIENT_ID: OPERATOR}, clock=clock)


@pytest.fixture
def code_store(clock: FakeClock) -> InMemoryAuthorizationCodeStore:
    """In-memory code store with the default 600 second lifetime."""
    return InMemoryAuthorizationCodeStore(600, clock=clock)


@pytest.fixture
def codec(clock: FakeClock) -> BearerTokenCodec:
    """HS256 bearer token codec."""
    return BearerTokenCodec(SecretStr(TEST_SECRET), clock=clock)


@pytest.fixture(scope="session")
def clients() -> ClientRegistry:
    """Registry holding ``client_001``; hashed once per session."""
    registry = ClientRegistry()
    registry.register(CLIENT_ID, CLIENT_SECRET)
    return registry


@pytest.fixture
def exchange_engine(
    code_store: InMemoryAuthorizationCodeStore,
    ledger: CountingLedger,
    codec: BearerTokenCodec,
    clients: ClientRegistry,
    clock: FakeClock,
) -> ExchangeEngine:
    """Exchange engine over the in-memory components."""
    return ExchangeEngine(code_store, ledger, codec, clients, clock=clock)


@pytest.fixture
def verification_engine(
    ledger: CountingLedger, codec: BearerTokenCodec, clock: FakeClock
) -> VerificationEngine:
    """Verification engine over the in-memory ledger."""
    return VerificationEngine(ledger, codec, clock=clock)


@pytest.fixture
def api_ledger() -> CountingLedger:
    """Ledger on the wall clock for HTTP tests."""
    return CountingLedger(OPERATOR, clients={CLIENT_ID: OPERATOR})


@pytest.fixture
def test_client(
    settings: Settings, api_ledger: CountingLedger
) -> Generator[TestClient, None, None]:
    """Test client running the application lifespan."""
    app = create_app(settings, ledger=api_ledger)
    with TestClient(app) as client:
        yield client
