"""
Engine configuration settings
"""
import os
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # App
    APP_NAME: str = "Vocab Adrenaline API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")  # development, staging, production

    # Persistence
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "file")  # memory, file, redis
    STATE_DIR: str = os.getenv("STATE_DIR", "data")
    STORAGE_KEY: str = "vocab-adrenaline-system"

    # Redis
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")

    # Engine tuning (applied to freshly created state only)
    CRITICAL_BASE_RATE: float = 0.05
    FEVER_TRIGGER_RATE: float = 0.05
    FEVER_TIMER_ENABLED: bool = os.getenv("FEVER_TIMER_ENABLED", "true").lower() == "true"

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR: str = os.getenv("LOG_DIR", "logs")
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "false").lower() == "true"  # always on in production
    LOG_JSON: bool = os.getenv("LOG_JSON", "false").lower() == "true"
    LOG_RETENTION: str = "14 days"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )


settings = Settings()
