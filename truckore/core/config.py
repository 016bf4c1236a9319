"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "sqlite://",
    "sqlite+pysqlite://",
)


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

    # Native store: embedded SQLite file. Disable to run on the fallback store only.
    NATIVE_STORE_ENABLED: bool = True
    DATABASE_URL: str = "sqlite:///data/truckore_data.db"

    # Fallback store: one JSON file per table
    FALLBACK_STORE_DIR: str = "data/fallback"
    FALLBACK_STORAGE_PREFIX: str = "truckore_"

    # Password hashing and lockout policy
    BCRYPT_ROUNDS: int = 12
    MAX_FAILED_LOGIN_ATTEMPTS: int = 5
    LOCKOUT_MINUTES: int = 30

    # Security log retention (run via cron or CLI)
    RETENTION_ENABLED: bool = True
    SECURITY_LOG_RETENTION_DAYS: int = 90

    # JWT authentication
    JWT_SECRET: SecretStr = SecretStr("change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 480

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a SQLite URL (e.g. sqlite:///data/truckore_data.db)"
            )
        return v.strip()

    @field_validator("FALLBACK_STORE_DIR")
    @classmethod
    def validate_fallback_store_dir(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("FALLBACK_STORE_DIR must be set and non-empty")
        return v.strip()

    @field_validator("FALLBACK_STORAGE_PREFIX")
    @classmethod
    def validate_fallback_storage_prefix(cls, v: str) -> str:
        v = v.strip()
        if not v.replace("_", "").replace("-", "").isalnum():
            raise ValueError(
                "FALLBACK_STORAGE_PREFIX may only contain letters, digits, '_' and '-'"
            )
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        # bcrypt accepts 4..31; anything below 10 is for tests only.
        if v < 4 or v > 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @field_validator("MAX_FAILED_LOGIN_ATTEMPTS")
    @classmethod
    def validate_max_failed_login_attempts(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("MAX_FAILED_LOGIN_ATTEMPTS must be between 1 and 100")
        return v

    @field_validator("LOCKOUT_MINUTES")
    @classmethod
    def validate_lockout_minutes(cls, v: int) -> int:
        if v < 1 or v > 1440:
            raise ValueError(
                "LOCKOUT_MINUTES must be between 1 and 1440 (1 min to 1 day)"
            )
        return v

    @field_validator("SECURITY_LOG_RETENTION_DAYS")
    @classmethod
    def validate_retention_days(cls, v: int) -> int:
        if v < 1 or v > 3650:
            raise ValueError(
                "SECURITY_LOG_RETENTION_DAYS must be between 1 and 3650 (1 day to 10 years)"
            )
        return v

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ALGORITHM must be set and non-empty")
        return v.strip()

    @field_validator("JWT_EXPIRE_MINUTES")
    @classmethod
    def validate_jwt_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 10080:
            raise ValueError(
                "JWT_EXPIRE_MINUTES must be between 1 and 10080 (1 min to 7 days)"
            )
        return v


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
