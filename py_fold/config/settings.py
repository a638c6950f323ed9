"""Runtime settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PY_FOLD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Batch Configuration
    batch_workers: int = Field(default=4, ge=1, description="Worker processes for batch generation")
    max_fold_count: int = Field(default=5000, ge=0, description="Largest fold count accepted per request")


# Instantiate singleton settings object
settings = Settings()
