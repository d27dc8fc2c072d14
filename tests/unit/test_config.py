"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from nft_oauth.core.config import Settings, clear_settings_cache, get_settings
from tests.fixtures.doubles import TEST_SECRET


class TestSettingsDefaults:
    """Test default configuration."""

    def test_defaults(self) -> None:
        """Test lifetimes and backends default to the documented values."""
        settings = Settings(jwt_secret=TEST_SECRET)

        assert settings.api_port == 3001
        assert settings.authorization_code_ttl_seconds == 600
        assert settings.bearer_token_ttl_seconds == 3600
        assert settings.ledger_record_ttl_seconds == 3600
        assert settings.code_store_backend == "memory"
        assert settings.ledger_backend == "memory"
        assert settings.jwt_algorithm == "HS256"
        assert settings.is_development
        assert not settings.is_production

    def test_secret_not_in_repr(self) -> None:
        """Test the signing secret stays out of reprs."""
        settings = Settings(jwt_secret=TEST_SECRET)

        assert TEST_SECRET not in repr(settings)
        assert settings.jwt_secret.get_secret_value() == TEST_SECRET

    def test_settings_are_frozen(self) -> None:
        """Test settings cannot be mutated after load."""
        settings = Settings(jwt_secret=TEST_SECRET)

        with pytest.raises(ValidationError):
            settings.api_port = 8000  # type: ignore[misc]


class TestSettingsValidation:
    """Test configuration validation."""

    def test_bearer_ttl_bounded_by_ledger_ttl(self) -> None:
        """Test a bearer token may not outlive its ledger record."""
        with pytest.raises(ValidationError) as exc_info:
            Settings(
                jwt_secret=TEST_SECRET,
                bearer_token_ttl_seconds=7200,
                ledger_record_ttl_seconds=3600,
            )

        assert "bearer_token_ttl_seconds" in str(exc_info.value)

    def test_short_secret_rejected(self) -> None:
        """Test signing secrets shorter than 32 characters are refused."""
        with pytest.raises(ValidationError):
            Settings(jwt_secret="too-short")

    def test_test_secret_rejected_in_production(self) -> None:
        """Test the built-in test secret cannot reach production."""
        with pytest.raises(ValidationError):
            Settings(api_env="production")

    def test_production_with_real_secret(self) -> None:
        """Test production accepts an explicit secret and client set."""
        settings = Settings(
            api_env="production",
            jwt_secret=TEST_SECRET,
            oauth_clients={"portal": "a-deployment-specific-client-secret"},
        )

        assert settings.is_production

    def test_development_clients_rejected_in_production(self) -> None:
        """Test the built-in client credentials cannot reach production."""
        with pytest.raises(ValidationError, match="client_001"):
            Settings(api_env="production", jwt_secret=TEST_SECRET)

    def test_development_client_with_rotated_secret_in_production(self) -> None:
        """Test production accepts the development client id with its own secret."""
        settings = Settings(
            api_env="production",
            jwt_secret=TEST_SECRET,
            oauth_clients={"client_001": "rotated-production-secret"},
        )

        assert settings.oauth_clients == {"client_001": "rotated-production-secret"}

    def test_development_clients_allowed_outside_production(self) -> None:
        """Test staging keeps the built-in client credentials."""
        settings = Settings(api_env="staging", jwt_secret=TEST_SECRET)

        assert settings.oauth_clients == {"client_001": "client_001_secret"}

    def test_web3_requires_contract(self) -> None:
        """Test the contract-backed ledger needs a contract address."""
        with pytest.raises(ValidationError):
            Settings(jwt_secret=TEST_SECRET, ledger_backend="web3")

    @pytest.mark.parametrize("address", ["0x1234", "not-an-address", "0x" + "g" * 40])
    def test_invalid_contract_address(self, address: str) -> None:
        """Test contract addresses must be 20-byte hex strings."""
        with pytest.raises(ValidationError):
            Settings(jwt_secret=TEST_SECRET, contract_address=address)

    @pytest.mark.parametrize("field", ["code_store_backend", "ledger_backend"])
    def test_unknown_backend(self, field: str) -> None:
        """Test only known backends are accepted."""
        with pytest.raises(ValidationError):
            Settings(jwt_secret=TEST_SECRET, **{field: "sqlite"})


class TestSettingsCache:
    """Test the settings cache."""

    def test_cached_instance(self) -> None:
        """Test get_settings returns one instance until cleared."""
        first = get_settings()

        assert get_settings() is first
        clear_settings_cache()
        assert get_settings() is not first

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test settings are read from environment variables."""
        monkeypatch.setenv("BEARER_TOKEN_TTL_SECONDS", "1200")
        monkeypatch.setenv("API_PORT", "8080")

        settings = get_settings()

        assert settings.bearer_token_ttl_seconds == 1200
        assert settings.api_port == 8080
