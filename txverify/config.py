"""Configuration settings for the txverify service."""

from functools import lru_cache

from pydantic_settings import BaseSettings

# Merchant receiving addresses used by the checkout flow.
_DEFAULT_PAYMENT_ADDRESSES = {
    "BTC": "3BuLwoGXiWx56RD7GsP98Nu6i9G2igYHss",
    "ETH": "0x30eD305B89b6207A5fa907575B395c9189728EbC",
    "USDT": "0xbC1bF337c63B2A1B8115001b356E6b5C2F09685c",
    "USDC": "0xbC1bF337c63B2A1B8115001b356E6b5C2F09685c",
}

_DEFAULT_MIN_CONFIRMATIONS = {
    "BTC": 3,
    "ETH": 12,
    "USDT": 12,
    "USDC": 12,
}


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # JWT
    jwt_secret_key: str  # Required - no default for security
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60

    # API keys: caller id -> "<key prefix>:<bcrypt hash>" (see `txverify api-key`)
    api_keys: dict[str, str] = {}

    # Payment policy (JSON maps when set from the environment)
    payment_addresses: dict[str, str] = dict(_DEFAULT_PAYMENT_ADDRESSES)
    min_confirmations: dict[str, int] = dict(_DEFAULT_MIN_CONFIRMATIONS)

    # Data sources
    btc_explorer_url: str = "https://blockchain.info"
    etherscan_api_url: str = "https://api.etherscan.io/v2/api"
    etherscan_chain_id: int = 1
    etherscan_api_key: str | None = None
    request_timeout_seconds: float = 5.0

    # Rate limiting (slowapi limit string)
    verify_rate_limit: str = "10/minute"
    # Sources allowed to set X-Forwarded-For for IP-keyed limits
    trusted_proxy_cidrs: list[str] = [
        "10.0.0.0/8",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "127.0.0.0/8",
        "::1/128",
    ]

    # App
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars not in model


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
