"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for MONGO_URI (module-level so validators can use it).
VALID_MONGO_URI_PREFIXES = (
    "mongodb://",
    "mongodb+srv://",
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
    PORT: int = 5000
    API_PREFIX: str = "/api"
    # Empty means "*" in dev and no cross-origin access in prod.
    CORS_ORIGINS: list[str] = []

    # MongoDB: the users collection lives in MONGO_DB_NAME
    MONGO_URI: str = "mongodb://localhost:27017/insurance"
    MONGO_DB_NAME: str = "insurance"
    MONGO_TIMEOUT_MS: int = 5000

    # JWT authentication
    JWT_SECRET: SecretStr = SecretStr("change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24 * 30

    # Bcrypt cost (rounds); tests lower it to keep hashing fast.
    BCRYPT_ROUNDS: int = 12

    @property
    def is_dev(self) -> bool:
        return self.APP_ENV == "dev"

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator("MONGO_URI")
    @classmethod
    def validate_mongo_uri(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("MONGO_URI must be set and non-empty")
        if not any(v.strip().startswith(prefix) for prefix in VALID_MONGO_URI_PREFIXES):
            raise ValueError(
                "MONGO_URI must be a MongoDB URL (e.g. mongodb:// or mongodb+srv://)"
            )
        return v.strip()

    @field_validator("MONGO_DB_NAME")
    @classmethod
    def validate_mongo_db_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("MONGO_DB_NAME must be set and non-empty")
        return v.strip()

    @field_validator("MONGO_TIMEOUT_MS")
    @classmethod
    def validate_mongo_timeout(cls, v: int) -> int:
        if v < 1 or v > 60000:
            raise ValueError("MONGO_TIMEOUT_MS must be between 1 and 60000")
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
        if v < 1 or v > 525600:
            raise ValueError(
                "JWT_EXPIRE_MINUTES must be between 1 and 525600 (1 min to 1 year)"
            )
        return v

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if v < 4 or v > 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
