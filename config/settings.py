"""
Configuration management.

All settings are read from environment variables (optionally from a `.env`
file) with development-friendly defaults.
"""

import os
from typing import List, Optional, Type

from dotenv import load_dotenv

load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """Base configuration class with all settings."""

    APP_ENV = os.getenv("APP_ENV", "development")
    DEBUG = os.getenv("DEBUG", "False").lower() == "true"

    # Database settings (DATABASE_URL wins over the discrete PG* variables)
    DATABASE_URL = os.getenv("DATABASE_URL")
    PGHOST = os.getenv("PGHOST", "localhost")
    PGPORT = int(os.getenv("PGPORT", 5432))
    PGDATABASE = os.getenv("PGDATABASE", "golf_rounds")
    PGUSER = os.getenv("PGUSER", "postgres")
    PGPASSWORD = os.getenv("PGPASSWORD", "")
    DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 2))
    DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 10))

    # HTTP settings
    CORS_ORIGINS = _split_csv(os.getenv("CORS_ORIGINS", "http://localhost:5173"))

    # Logging settings
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Retry policy for transient backend failures
    RETRY_MAX_RETRIES = int(os.getenv("RETRY_MAX_RETRIES", 3))
    RETRY_BASE_DELAY = float(os.getenv("RETRY_BASE_DELAY", 1.0))
    RETRY_MAX_DELAY = float(os.getenv("RETRY_MAX_DELAY", 5.0))

    # Round list pagination
    ROUNDS_PAGE_SIZE = int(os.getenv("ROUNDS_PAGE_SIZE", 10))
    ROUNDS_MAX_PAGE_SIZE = 100

    # Idle round-entry sessions are dropped after this many seconds
    ENTRY_SESSION_TTL = int(os.getenv("ENTRY_SESSION_TTL", 7200))

    @classmethod
    def is_development(cls) -> bool:
        return cls.APP_ENV == "development"


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")


class ProductionConfig(Config):
    """Production configuration."""
    APP_ENV = "production"
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    APP_ENV = "testing"
    TESTING = True
    DEBUG = True
    RETRY_BASE_DELAY = 0.0
    RETRY_MAX_DELAY = 0.0


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}


def get_config(env: Optional[str] = None) -> Type[Config]:
    """Pick the config class for `env` (defaults to $APP_ENV)."""
    env = env or os.getenv("APP_ENV", "default")
    return config.get(env, config["default"])
