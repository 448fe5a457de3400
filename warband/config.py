"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./warband.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Identity (resolved upstream by the identity provider)
    IDENTITY_HEADER: str = "X-User-Id"
    ADMIN_USER_IDS: list[str] = []


settings = Settings()
