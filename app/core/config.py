"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "sqlite://",
    "sqlite+pysqlite://",
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
)

# HMAC-SHA256 keys shorter than the digest size are rejected by most JWT stacks.
JWT_SECRET_MIN_LEN = 32


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
    API_PREFIX: str = "/api"

    # SQLite for local runs; point at Postgres in production
    DATABASE_URL: str = "sqlite:///./multilingual_crud.db"

    # JWT access tokens (bearer)
    JWT_SECRET: SecretStr = SecretStr("change-me-in-production-use-32-chars-or-more")
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "MultilingualCRUD_Api"
    JWT_AUDIENCE: str = "MultilingualCRUD_Api_Client"
    JWT_EXPIRE_MINUTES: int = 15

    # Dashboard cookie session (sliding expiration)
    SESSION_COOKIE_NAME: str = "mc_session"
    SESSION_EXPIRE_MINUTES: int = 15
    SESSION_COOKIE_SECURE: bool = False

    # Anti-forgery cookie and the lifetime of the signed token rendered into forms
    CSRF_COOKIE_NAME: str = "mc_csrf"
    CSRF_EXPIRE_MINUTES: int = 60

    # Account created/repaired on startup and granted the Admin role
    SEED_ADMIN_EMAIL: str = "admin@example.com"
    SEED_ADMIN_USERNAME: str = "admin"
    SEED_ADMIN_PASSWORD: SecretStr = SecretStr("Admin@12345")

    # Localization
    SUPPORTED_LOCALES: list[str] = ["en", "hi", "bn"]
    DEFAULT_LOCALE: str = "en"

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.strip().startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a SQLite or PostgreSQL URL "
                "(e.g. sqlite:///./app.db or postgresql+psycopg2://...)"
            )
        return v.strip()

    @field_validator("API_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith("/"):
            raise ValueError("API_PREFIX must start with '/' (e.g. /api)")
        return v

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        raw = v.get_secret_value()
        if not raw or not raw.strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        if len(raw) < JWT_SECRET_MIN_LEN:
            raise ValueError(f"JWT_SECRET must be at least {JWT_SECRET_MIN_LEN} characters")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ALGORITHM must be set and non-empty")
        if not v.strip().upper().startswith("HS"):
            raise ValueError("JWT_ALGORITHM must be an HMAC algorithm (HS256, HS384, HS512)")
        return v.strip().upper()

    @field_validator("JWT_ISSUER", "JWT_AUDIENCE", "SESSION_COOKIE_NAME")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be set and non-empty")
        return v.strip()

    @field_validator("JWT_EXPIRE_MINUTES", "SESSION_EXPIRE_MINUTES")
    @classmethod
    def validate_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 10080:
            raise ValueError("expiry must be between 1 and 10080 minutes (1 min to 7 days)")
        return v

    @field_validator("SEED_ADMIN_EMAIL")
    @classmethod
    def validate_seed_admin_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("SEED_ADMIN_EMAIL must be an email address")
        return v.strip()

    @field_validator("SUPPORTED_LOCALES")
    @classmethod
    def validate_supported_locales(cls, v: list[str]) -> list[str]:
        locales = [code.strip().lower() for code in v if code and code.strip()]
        if not locales:
            raise ValueError("SUPPORTED_LOCALES must contain at least one locale")
        return locales

    @model_validator(mode="after")
    def validate_default_locale(self) -> "Settings":
        self.DEFAULT_LOCALE = self.DEFAULT_LOCALE.strip().lower()
        if self.DEFAULT_LOCALE not in self.SUPPORTED_LOCALES:
            raise ValueError("DEFAULT_LOCALE must be one of SUPPORTED_LOCALES")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
