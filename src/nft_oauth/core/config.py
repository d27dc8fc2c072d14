# NFT OAuth - NFT-backed OAuth2 Token Service
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from beartype import beartype
from pydantic import Field, SecretStr, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_TEST_SECRET_PREFIX = "test-"
_DEVELOPMENT_CLIENTS = {"client_001": "client_001_secret"}


class Settings(BaseSettings):
    """Application settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_file=None,
        env_file_encoding="utf-8",
        frozen=True,  # Immutable settings
        validate_default=True,
        extra="forbid",
    )

    # API Configuration
    app_name: str = Field(
        default="NFT OAuth",
        description="Application name",
        min_length=1,
    )
    api_host: str = Field(
        default="0.0.0.0",  # nosec B104 - Binding to all interfaces is needed for containerized deployment
        description="API host to bind to",
    )
    api_port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        description="API port to bind to",
    )
    api_env: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="API environment",
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level",
    )
    api_cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed CORS origins",
    )

    # Bearer token signing
    jwt_secret: SecretStr = Field(
        default=SecretStr("test-jwt-secret-for-testing-only-never-use-in-production-32-chars"),
        description="Bearer token signing secret",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        pattern="^HS(256|384|512)$",
        description="Bearer token signing algorithm",
    )

    # Lifetimes
    authorization_code_ttl_seconds: int = Field(
        default=600,
        ge=1,
        le=3600,
        description="Authorization code lifetime in seconds",
    )
    bearer_token_ttl_seconds: int = Field(
        default=3600,
        ge=60,
        le=86400,
        description="Bearer token lifetime in seconds",
    )
    ledger_record_ttl_seconds: int = Field(
        default=3600,
        ge=60,
        le=31_536_000,
        description="Lifetime of the minted ledger record in seconds",
    )

    # Authorization code store
    code_store_backend: str = Field(
        default="memory",
        pattern="^(memory|redis)$",
        description="Authorization code store backend",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
        min_length=1,
    )

    # Ledger
    ledger_backend: str = Field(
        default="memory",
        pattern="^(memory|web3)$",
        description="Ledger gateway backend",
    )
    ledger_rpc_url: str = Field(
        default="http://127.0.0.1:8545",
        description="JSON-RPC endpoint of the ledger node",
        min_length=1,
    )
    contract_address: str | None = Field(
        default=None,
        description="Deployed OAuth NFT contract address",
    )
    ledger_operator_address: str | None = Field(
        default=None,
        description="Operator account used to mint and revoke (first node account when unset)",
    )
    ledger_timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=600.0,
        description="Upper bound on a single ledger call, receipts included",
    )

    # OAuth clients
    oauth_clients: dict[str, str] = Field(
        default_factory=lambda: dict(_DEVELOPMENT_CLIENTS),
        description="Registered client secrets keyed by client id (plaintext or argon2 hash)",
    )

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(
        cls: type["Settings"], v: SecretStr, info: ValidationInfo
    ) -> SecretStr:
        """Ensure the signing secret is long enough and not a test value in production."""
        raw = v.get_secret_value()
        if len(raw) < 32:
            raise ValueError("JWT secret must be at least 32 characters")
        if info.data.get("api_env") == "production" and raw.startswith(
            _TEST_SECRET_PREFIX
        ):
            raise ValueError(
                "Test JWT secret cannot be used in production. "
                "Set JWT_SECRET environment variable."
            )
        return v

    @field_validator("oauth_clients")
    @classmethod
    def validate_oauth_clients(
        cls: type["Settings"], v: dict[str, str], info: ValidationInfo
    ) -> dict[str, str]:
        """Refuse the development client credentials in production."""
        if info.data.get("api_env") != "production":
            return v
        for client_id, secret in _DEVELOPMENT_CLIENTS.items():
            if v.get(client_id) == secret:
                raise ValueError(
                    f"Development credentials for {client_id} cannot be used in "
                    "production. Set OAUTH_CLIENTS environment variable."
                )
        return v

    @field_validator("contract_address", "ledger_operator_address")
    @classmethod
    def validate_address(cls: type["Settings"], v: str | None) -> str | None:
        """Reject values that are not 20-byte hex addresses."""
        if v is None:
            return v
        if not v.startswith("0x") or len(v) != 42:
            raise ValueError(f"Invalid ledger address: {v}")
        int(v[2:], 16)
        return v

    @model_validator(mode="after")
    def validate_lifetimes(self) -> "Settings":
        """A bearer token must never outlive the ledger record it points at."""
        if self.bearer_token_ttl_seconds > self.ledger_record_ttl_seconds:
            raise ValueError(
                f"bearer_token_ttl_seconds ({self.bearer_token_ttl_seconds}) must be "
                f"<= ledger_record_ttl_seconds ({self.ledger_record_ttl_seconds})"
            )
        if self.ledger_backend == "web3" and not self.contract_address:
            raise ValueError("contract_address is required for the web3 ledger backend")
        return self

    @property
    @beartype
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.api_env == "production"

    @property
    @beartype
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.api_env == "development"


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
