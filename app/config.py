"""Configuration settings for AudioMind."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

STORAGE_BACKENDS = ("memory", "sql")


class Settings:
    """Application settings loaded from environment variables."""

    # Storage
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "memory").lower()
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./audiomind.db")

    # OpenAI
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_TRANSCRIPTION_MODEL: str = os.getenv("OPENAI_TRANSCRIPTION_MODEL", "whisper-1")
    OPENAI_CHAT_MODEL: str = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")
    OPENAI_TIMEOUT_SECONDS: float = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "600"))

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", "480"))

    # Upload
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    MAX_UPLOAD_SIZE_MB: int = int(os.getenv("MAX_UPLOAD_SIZE_MB", "500"))

    # Jobs
    JOB_HISTORY_LIMIT: int = int(os.getenv("JOB_HISTORY_LIMIT", "500"))

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    def __init__(self) -> None:
        self._generated_jwt_secret = not self.JWT_SECRET_KEY
        if self._generated_jwt_secret:
            self.JWT_SECRET_KEY = secrets.token_urlsafe(32)

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self._generated_jwt_secret:
            errors.append("JWT_SECRET_KEY is not set - using auto-generated key (not persistent across restarts)")
        if not self.OPENAI_API_KEY:
            errors.append("OPENAI_API_KEY is not set - transcription and summaries will fail")
        if self.STORAGE_BACKEND not in STORAGE_BACKENDS:
            errors.append(f"Unknown STORAGE_BACKEND '{self.STORAGE_BACKEND}' - falling back to 'memory'")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
