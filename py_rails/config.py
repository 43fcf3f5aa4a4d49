"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings pulled from environment variables."""

    # Turn build budget
    turn_build_budget: int = Field(
        default=20, description="Maximum ECU spent on track and upgrades per turn"
    )
    crossgrade_build_budget: int = Field(
        default=15, description="Maximum track spend for the rest of a turn after a crossgrade"
    )

    # Train transitions
    upgrade_cost: int = Field(default=20, description="Cost of a train upgrade")
    crossgrade_cost: int = Field(default=5, description="Cost of a train crossgrade")

    # Track pricing
    major_city_connection_cost: int = Field(
        default=5, description="Flat cost of a player's first edge into a major city"
    )
    track_usage_fee: int = Field(
        default=4, description="Fee paid to each opponent whose track is used in a turn"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Logging format (json or console)")

    model_config = SettingsConfigDict(
        env_prefix="PY_RAILS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
