# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - JWT_SECRET (HS256 signing secret shared with the auth provider)

    Optional:
      - DATABASE_URL (defaults to a local SQLite file)
      - STRICT_STATUS_TRANSITIONS (reject out-of-order tracking updates)
    """

    PROJECT_NAME: str = "FoodDash Ordering API"
    API_PREFIX: str = "/api"

    DATABASE_URL: str = "sqlite:///./fooddash.db"

    # JWT verification (backend-side)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    # Order tracking
    ESTIMATED_DELIVERY_MINUTES: int = 45
    STRICT_STATUS_TRANSITIONS: bool = False

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
