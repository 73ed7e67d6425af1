"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Guild simulation settings.

    Values are loaded from environment variables (prefixed with GUILDHALL_)
    first, then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GUILDHALL_",
        extra="ignore",
    )

    LOG_LEVEL: str = "INFO"

    # Assignment planning
    MIN_PARTY_SIZE: int = 1
    PREVIEW_SEED: int = 1337
    PREVIEW_DAY_INDEX: int = 0

    # Default resolve options
    GLOBAL_DIFFICULTY_MULTIPLIER: float = 1.0
    CRITICAL_SUCCESS_BONUS: float = 0.0
    ENABLE_INJURY_SIMULATION: bool = True
    ENABLE_TRAIT_EFFECTS: bool = True
    CLAMP_INJURY_PENALTY: bool = True

    # Daily recovery applied by GuildService.advance_day
    DAILY_FATIGUE_RECOVERY: int = 15
    DAILY_HP_RECOVERY: int = 10

    EVENT_MAX_DEPTH: int = 5


settings = Settings()
