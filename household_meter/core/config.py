"""Application configuration settings."""

import os
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

from household_meter.models.enums import ReadingStrictness


def _get_default_database_url() -> str:
    """Get the default database URL, using a mounted volume path if available."""
    if os.path.isdir("/data"):
        return "sqlite:////data/household_meter.db"
    return "sqlite:///./household_meter.db"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    PROJECT_NAME: str = "Household Meter"
    VERSION: str = "0.1.0"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = _get_default_database_url()

    # Identity: the token is validated upstream (e.g. by an access proxy)
    AUTH_COOKIE_NAME: str = "CF_Authorization"
    USERNAME_CLAIM_PATH: str = "custom.family_name"
    UNKNOWN_USERNAME: str = "unknown"

    # Readings
    READING_STRICTNESS: ReadingStrictness = ReadingStrictness.STRICT
    KWH_ROUNDING_STEP: Decimal = Decimal("0.001")
    MONTHLY_ROLLUP_ENABLED: bool = True


settings = Settings()
