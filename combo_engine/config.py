"""Engine configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="COMBO_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Generation caps
    max_combos_per_source: int = 1500
    max_total_combos: int = 5000
    min_combo_length: int = 2
    max_combo_length: int = 4
    min_token_length: int = 2

    # Selection
    top_n: int = 500
    recommendation_limit: int = 10

    # Cooperative scheduling (async entry point)
    chunk_size: int = 250

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator(
        "max_combos_per_source",
        "max_total_combos",
        "top_n",
        "chunk_size",
        "min_token_length",
    )
    @classmethod
    def _require_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("min_combo_length", "max_combo_length")
    @classmethod
    def _clamp_combo_length(cls, value: int) -> int:
        if value < 2 or value > 4:
            raise ValueError("combo length must be between 2 and 4")
        return value

    @property
    def combo_lengths(self) -> tuple[int, ...]:
        """Combo lengths to generate, shortest first."""
        low = min(self.min_combo_length, self.max_combo_length)
        high = max(self.min_combo_length, self.max_combo_length)
        return tuple(range(low, high + 1))


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()

    return settings


settings = get_settings()
