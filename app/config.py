"""Centralized configuration from environment variables.

All configuration that varies between environments (local dev, CI, production)
is read from environment variables here. Import from this module instead of
reading os.environ directly in service code.
"""
import os
from functools import lru_cache


class Settings:
    """Application settings loaded from environment variables."""

    INSTANCE_CONNECTION_NAME: str = os.getenv("INSTANCE_CONNECTION_NAME", "")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_PORT: str = os.getenv("DB_PORT", "5432")
    DB_NAME: str = os.getenv("DB_NAME", "kitchen_ops")
    DB_USER: str = os.getenv("DB_USER", "kitchen_app")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")

    # Auth service tokens (HS256 shared secret)
    AUTH_JWT_SECRET: str = os.getenv("AUTH_JWT_SECRET", "")
    AUTH_JWT_AUDIENCE: str = os.getenv("AUTH_JWT_AUDIENCE", "authenticated")
    AUTH_JWT_ALGORITHM: str = os.getenv("AUTH_JWT_ALGORITHM", "HS256")

    # Consumption reporting
    CONSUMPTION_DEFAULT_DAYS: int = int(os.getenv("CONSUMPTION_DEFAULT_DAYS", "30"))
    MAX_CONSUMPTION_DAYS: int = int(os.getenv("MAX_CONSUMPTION_DAYS", "1095"))
    WASTE_RECOVERY_RATIO: float = float(os.getenv("WASTE_RECOVERY_RATIO", "0.75"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    CORS_ORIGINS: list[str] = os.getenv(
        "CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"
    ).split(",")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
