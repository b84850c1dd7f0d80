from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ENV: Literal["development", "production", "test"] = "development"

    # Session cookie
    SESSION_SECRET: Optional[str] = Field(default=None, min_length=32)
    SESSION_MAX_AGE: int = Field(default=60 * 60 * 24 * 7, ge=60)
    # unsigned JSON cookies, development only
    SESSION_ALLOW_UNSIGNED: bool = False

    # Database: either a full URL or the POSTGRES_* parts
    DATABASE_URL: Optional[str] = None
    POSTGRES_HOST: Optional[str] = None
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    USE_MOCK_DATA: Optional[bool] = None

    ENABLE_DEBUG_LOGGING: Optional[bool] = None

    @field_validator("SESSION_SECRET", "DATABASE_URL", "POSTGRES_HOST", mode="before")
    @classmethod
    def _blank_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.ENV == "development"

    @property
    def database_url(self) -> Optional[str]:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.POSTGRES_HOST and self.POSTGRES_DB:
            return (
                f"postgresql+psycopg2://"
                f"{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}"
                f"/{self.POSTGRES_DB}"
            )
        return None

    @property
    def use_mock_data(self) -> bool:
        """
        USE_MOCK_DATA wins when set; otherwise mock data is used
        whenever no database is configured.
        """
        if self.USE_MOCK_DATA is not None:
            return self.USE_MOCK_DATA
        return self.database_url is None

    @property
    def debug_logging(self) -> bool:
        if self.ENABLE_DEBUG_LOGGING is not None:
            return self.ENABLE_DEBUG_LOGGING
        return self.is_development


@lru_cache
def get_settings() -> Settings:
    return Settings()


def validate_production_config(settings: Settings) -> List[str]:
    problems: List[str] = []

    if settings.is_production:
        if not settings.SESSION_SECRET:
            problems.append("SESSION_SECRET is required in production")
        if settings.use_mock_data:
            problems.append("A database must be configured in production")
        if settings.SESSION_ALLOW_UNSIGNED:
            problems.append("SESSION_ALLOW_UNSIGNED has no effect in production")

    return problems
