"""
Configuration Management for Household Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every switch that changes how the ledger store behaves (strict guards,
balance resync on income edits, where the snapshot lives) is visible in
one place and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """
    Ledger store settings.

    Loads configuration from LEDGER_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Persistence
    storage_dir: Path = Field(
        default=Path("data"),
        description="Directory holding one JSON file per storage slot"
    )
    storage_slot: str = Field(
        default="finance_data",
        min_length=1,
        description="Name of the slot the ledger snapshot is stored under"
    )

    # Invariants
    strict_invariants: bool = Field(
        default=True,
        description=(
            "Reject edits of system-owned savings rows, loan principal "
            "changes, direct balance edits and duplicate custom names"
        )
    )
    resync_balances_on_income_edit: bool = Field(
        default=False,
        description=(
            "Adjust the auto-savings bank posting when an income is "
            "edited or deleted"
        )
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Level for the household_ledger loggers"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any case, store the stdlib spelling."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level


@lru_cache()
def get_settings() -> LedgerSettings:
    """
    Get ledger settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return LedgerSettings()
