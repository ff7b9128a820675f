"""Application configuration."""

import os

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

BASE_SEPOLIA_CHAIN_ID = 84532


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    contract_address: str
    rpc_url: str
    private_key: str
    gemini_api_key: str
    chain_id: int = BASE_SEPOLIA_CHAIN_ID
    contract_abi_path: str | None = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_temperature: float = 0.7
    event_poll_interval_seconds: float = 2.0
    event_max_block_span: int = 1000
    event_max_handler_attempts: int = 3
    watch_preference_events: bool = False
    log_level: str = "INFO"
    suggestion_cache_max_entries: int | None = None
    suggestion_cache_ttl_seconds: int | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @field_validator("private_key")
    @classmethod
    def _prefix_private_key(cls, value: str) -> str:
        """Accept signing keys with or without the 0x prefix."""
        cleaned = value.strip()
        if not cleaned.startswith("0x"):
            return f"0x{cleaned}"
        return cleaned
