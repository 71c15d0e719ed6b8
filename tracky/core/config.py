"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "sqlite://",
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
)

# Development-only signing secret. Anyone who reads this file can forge auth cookies
# for a deployment that keeps it, so APP_ENV=prod refuses to start with it.
DEV_COOKIE_SECRET = "tracky-dev-secret-key-change-in-prod"


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # SQLite file by default; any PostgreSQL URL works as well
    DATABASE_URL: str = "sqlite:///./tracky.db"
    # Create missing tables on startup (alembic is preferred for Postgres)
    DB_AUTO_CREATE: bool = True

    # Authentication: "signed" = stateless HMAC cookie (auth_token),
    # "session" = opaque handle kept in process memory (session_token)
    AUTH_STRATEGY: Literal["signed", "session"] = "signed"
    COOKIE_SECRET: SecretStr = SecretStr(DEV_COOKIE_SECRET)
    # Set to True behind HTTPS so browsers only send the cookie over TLS
    COOKIE_SECURE: bool = False

    # Files
    STATIC_DIR: str = "static"
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    MAX_IMAGE_DIMENSION: int = 1920
    JPEG_QUALITY: int = 85

    # Ollama (local LLM): optional; app runs without it if analysis is not used
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llama3.2"
    OLLAMA_REQUEST_TIMEOUT_SEC: float = 120.0
    OLLAMA_TEMPERATURE: float = 0.2

    @field_validator("API_V1_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith("/"):
            raise ValueError("API_V1_PREFIX must start with '/' (e.g. /api/v1)")
        return v

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a SQLite or PostgreSQL URL "
                "(e.g. sqlite:///./tracky.db or postgresql://...)"
            )
        return v.strip()

    @field_validator("COOKIE_SECRET")
    @classmethod
    def validate_cookie_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("COOKIE_SECRET must be set and non-empty")
        return v

    @field_validator("MAX_UPLOAD_BYTES")
    @classmethod
    def validate_max_upload_bytes(cls, v: int) -> int:
        if v < 1024 or v > 100 * 1024 * 1024:
            raise ValueError("MAX_UPLOAD_BYTES must be between 1 KB and 100 MB")
        return v

    @field_validator("MAX_IMAGE_DIMENSION")
    @classmethod
    def validate_max_image_dimension(cls, v: int) -> int:
        if v < 16 or v > 10000:
            raise ValueError("MAX_IMAGE_DIMENSION must be between 16 and 10000")
        return v

    @field_validator("JPEG_QUALITY")
    @classmethod
    def validate_jpeg_quality(cls, v: int) -> int:
        if v < 1 or v > 95:
            raise ValueError("JPEG_QUALITY must be between 1 and 95")
        return v

    @field_validator("OLLAMA_BASE_URL")
    @classmethod
    def validate_ollama_base_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("OLLAMA_BASE_URL must be set and non-empty")
        s = v.strip().lower()
        if not (s.startswith("http://") or s.startswith("https://")):
            raise ValueError(
                "OLLAMA_BASE_URL must use http or https (e.g. http://localhost:11434)"
            )
        return v.strip()

    @field_validator("OLLAMA_REQUEST_TIMEOUT_SEC")
    @classmethod
    def validate_ollama_timeout(cls, v: float) -> float:
        if v <= 0 or v > 300:
            raise ValueError(
                "OLLAMA_REQUEST_TIMEOUT_SEC must be greater than 0 and at most 300"
            )
        return v

    @field_validator("OLLAMA_TEMPERATURE")
    @classmethod
    def validate_ollama_temperature(cls, v: float) -> float:
        if v < 0 or v > 2:
            raise ValueError("OLLAMA_TEMPERATURE must be between 0 and 2")
        return v

    @model_validator(mode="after")
    def reject_dev_secret_in_prod(self) -> "Settings":
        if self.APP_ENV == "prod" and self.uses_dev_cookie_secret:
            raise ValueError("COOKIE_SECRET must be changed from the development default in prod")
        return self

    @property
    def uses_dev_cookie_secret(self) -> bool:
        return self.COOKIE_SECRET.get_secret_value() == DEV_COOKIE_SECRET


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()
