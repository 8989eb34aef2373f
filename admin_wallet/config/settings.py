"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from admin_wallet.config.constants import (
    BLOCKCHAIN_RECEIPT_TIMEOUT,
    BLOCKCHAIN_RPC_TIMEOUT,
    DEFAULT_CONTRACT_GAS_LIMIT,
    DEFAULT_GAS_PRICE_GWEI,
    DEFAULT_MANIFEST_KEYS,
    DEFAULT_TRANSFER_GAS_LIMIT,
    DEVELOPMENT_ENVIRONMENT,
    TOPUP_CAP_GWEI,
    TOPUP_MIN_RATIO,
    TOPUP_SCALE,
)


WEBSOCKET_TRANSPORT = "WebSocket"
HTTP_TRANSPORT = "HttpProvider"

BUNDLED_CONTRACTS_DIR = Path(__file__).resolve().parent.parent / "contracts"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Transport
    web3_transport: str = HTTP_TRANSPORT
    websocket_web3_provider: str = "ws://localhost:8545"
    http_web3_provider: str = "http://localhost:8545"
    infura_key: str = ""  # appended to http_web3_provider

    # Network
    network: str = "develop"
    network_id: int = Field(default=4447, ge=0)

    # Admin credentials (private key wins when both are set)
    private_key: str | None = None
    mnemonic: str | None = None

    # Contract artifacts and deployment manifest
    contracts_dir: Path = BUNDLED_CONTRACTS_DIR
    deployment_manifest: Path = BUNDLED_CONTRACTS_DIR / "deployment.json"
    manifest_keys: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_MANIFEST_KEYS),
        description="Contract kind -> manifest entry name, merged over the defaults",
    )

    # Gas
    gas_price_gwei: int = Field(default=DEFAULT_GAS_PRICE_GWEI, gt=0)
    contract_gas_limit: int = Field(default=DEFAULT_CONTRACT_GAS_LIMIT, gt=21000)
    transfer_gas_limit: int = Field(default=DEFAULT_TRANSFER_GAS_LIMIT, ge=21000)

    # Timeouts (seconds)
    rpc_timeout: int = Field(default=BLOCKCHAIN_RPC_TIMEOUT, gt=0)
    receipt_timeout: int = Field(default=BLOCKCHAIN_RECEIPT_TIMEOUT, gt=0)

    # Top-up policy
    topup_cap_gwei: int = Field(
        default=TOPUP_CAP_GWEI,
        gt=0,
        description="Native balance (gwei) a verified user is topped up to",
    )
    topup_scale: int = Field(default=TOPUP_SCALE, gt=0)
    topup_min_ratio: float = Field(
        default=float(TOPUP_MIN_RATIO),
        ge=0,
        description="Minimum scaled deficit required to send a top-up",
    )

    # Application
    environment: str = "production"
    log_level: str = "INFO"
    log_file: str | None = None

    @field_validator('web3_transport', mode='before')
    @classmethod
    def validate_transport(cls, v: str | None) -> str:
        """Fall back to the HTTP provider for empty or unknown transports."""
        if v in (WEBSOCKET_TRANSPORT, HTTP_TRANSPORT):
            return v
        if v:
            logger.warning(
                f"Unknown WEB3_TRANSPORT '{v}', using {HTTP_TRANSPORT}"
            )
        return HTTP_TRANSPORT

    @field_validator('manifest_keys')
    @classmethod
    def merge_manifest_keys(cls, v: dict[str, str]) -> dict[str, str]:
        """Overlay configured manifest keys on the defaults."""
        unknown = sorted(set(v) - set(DEFAULT_MANIFEST_KEYS))
        if unknown:
            raise ValueError(
                f"Unknown contracts in MANIFEST_KEYS: {', '.join(unknown)}"
            )
        return {**DEFAULT_MANIFEST_KEYS, **v}

    @field_validator('environment', 'log_level')
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        """Strip environment name and log level."""
        return v.strip()

    @field_validator('private_key', 'mnemonic', mode='before')
    @classmethod
    def empty_to_none(cls, v: str | None) -> str | None:
        """Treat blank credentials as unset."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @model_validator(mode='after')
    def warn_ambiguous_credentials(self) -> 'Settings':
        """Private key takes precedence over mnemonic."""
        if self.private_key and self.mnemonic:
            logger.warning(
                "Both PRIVATE_KEY and MNEMONIC are set, "
                "the admin account is derived from PRIVATE_KEY"
            )
        return self

    @property
    def http_provider_url(self) -> str:
        """HTTP endpoint with the API key suffix."""
        return f"{self.http_web3_provider}{self.infura_key}"

    @property
    def is_development(self) -> bool:
        """Check for the development environment (top-up rate limit is off)."""
        return self.environment.lower() == DEVELOPMENT_ENVIRONMENT
