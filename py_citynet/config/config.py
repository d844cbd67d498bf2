from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CITYNET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="json", description="Logging format (e.g., console, json)"
    )

    # Generation Configuration
    default_seed: int = Field(
        default=42,
        ge=0,
        lt=2**64,
        description="Seed used when the caller does not supply one",
    )


# Instantiate singleton settings object
settings = Settings()
