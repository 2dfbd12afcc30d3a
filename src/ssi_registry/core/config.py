"""Core configuration - centralized config for the ssi_registry package.

All environment-based configuration should flow through this module.

Usage:
    from ssi_registry.core.config import get_config
    config = get_config()

    chain_id = config.chain_id
    log_level = config.log_level
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RegistrySettings(BaseSettings):
    """Configuration settings for the SSI registry.

    Settings can be configured via environment variables with the SSI_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="SSI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # LEDGER SETTINGS
    # ==========================================================================

    chain_id: int = Field(default=1337, description="Chain id mixed into transaction hashes")
    block_time_seconds: int = Field(
        default=1,
        description="Seconds the block timestamp advances per mined block",
    )
    genesis_timestamp: int | None = Field(
        default=None,
        description="Timestamp of the genesis block (defaults to the current time)",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
    )
    log_file: str | None = Field(default=None, description="Log file path (optional)")

    # ==========================================================================
    # CLI SETTINGS
    # ==========================================================================

    state_file: Path = Field(
        default=Path(".ssi-registry/state.json"),
        description="JSON snapshot of the ledger used by the CLI between invocations",
    )

    @field_validator("block_time_seconds")
    @classmethod
    def _positive_block_time(cls, value: int) -> int:
        if value < 1:
            raise ValueError("block_time_seconds must be at least 1")
        return value


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: RegistrySettings | None = None


def get_config() -> RegistrySettings:
    """Get the global configuration instance.

    Returns:
        The singleton RegistrySettings instance.
    """
    global _config
    if _config is None:
        _config = RegistrySettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
