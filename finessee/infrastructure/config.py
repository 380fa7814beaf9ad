"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Storage: "memory" keeps everything in process, "database" uses SQLAlchemy
    storage_backend: str = "memory"
    database_url: str = "postgresql+asyncpg://finessee:finessee_dev_password@db:5432/finessee"
    seed_sample_data: bool = True

    # Sessions
    session_secret: str = "dev-session-secret-change-in-production"
    session_max_age: int = 14 * 24 * 60 * 60

    # Listing
    default_page_limit: int = 50
    max_page_limit: int = 500

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
