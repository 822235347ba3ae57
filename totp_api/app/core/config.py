# totp_api/app/core/config.py
"""
Configuration using pydantic-settings.

Security considerations:
- SECRET_KEY must be set via env outside development (it verifies caller tokens)
- CORS_ORIGINS parsed from comma-separated env var, never defaults to "*"
- Database URLs normalized for async drivers automatically
- OTP policy mirrors the identity provider's realm OTP policy
"""
from functools import lru_cache
from typing import List

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


SUPPORTED_OTP_ALGORITHMS = ("HmacSHA1", "HmacSHA256", "HmacSHA512")
DEV_SECRET_KEY = "INSECURE_DEV_KEY_CHANGE_IN_PRODUCTION"


class Settings(BaseSettings):
    """
    Strictly typed application settings.

    Priority for loading:
    1. Environment variables (highest priority)
    2. .env file (via pydantic-settings)
    3. Default values (lowest priority, dev-safe only)
    """

    # ─────────────────────────────────────────────────────────────
    # Application metadata
    # ─────────────────────────────────────────────────────────────
    PROJECT_NAME: str = "TOTP API"
    PROJECT_VERSION: str = "1.0.1"
    API_V1_STR: str = "/api/v1"

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ─────────────────────────────────────────────────────────────
    # Security: bearer token verification
    # ─────────────────────────────────────────────────────────────
    SECRET_KEY: str = DEV_SECRET_KEY
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Realm role a service account needs to manage TOTP credentials
    MANAGE_TOTP_ROLE: str = "manage-totp"

    # ─────────────────────────────────────────────────────────────
    # Database Configuration
    # Priority: DATABASE_URL env var → SQLite fallback for local dev
    # ─────────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./totp.db"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """
        Normalize database URLs for async SQLAlchemy compatibility.

        Conversions:
        - postgres://     → postgresql+asyncpg://
        - postgresql://   → postgresql+asyncpg://
        - sqlite:///      → sqlite+aiosqlite:///
        """
        if v is None:
            return "sqlite+aiosqlite:///./totp.db"

        url = v.strip()

        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)

        if url.startswith("postgresql://") and "+asyncpg" not in url:
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)

        if url.startswith("sqlite:///") and "+aiosqlite" not in url:
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)

        return url

    # MUST be False in production to prevent SQL query exposure
    DATABASE_ECHO: bool = False

    # ─────────────────────────────────────────────────────────────
    # CORS Configuration
    # Empty string → empty list (NOT "*")
    # ─────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:8080,http://127.0.0.1:8080"

    @property
    def BACKEND_CORS_ORIGINS(self) -> List[str]:
        """Parse CORS_ORIGINS string into a list of allowed origins."""
        if not self.CORS_ORIGINS or not self.CORS_ORIGINS.strip():
            return []

        return [
            origin.strip()
            for origin in self.CORS_ORIGINS.split(",")
            if origin.strip()
        ]

    # ─────────────────────────────────────────────────────────────
    # TOTP credential format
    # Raw secrets are fixed-length; the salt is stored beside them
    # ─────────────────────────────────────────────────────────────
    TOTP_SECRET_LENGTH: int = 20
    TOTP_SALT_LENGTH: int = 16

    # ─────────────────────────────────────────────────────────────
    # Realm OTP policy
    # Snapshotted into each credential when it is created
    # ─────────────────────────────────────────────────────────────
    OTP_ISSUER: str = "TOTP API"
    OTP_POLICY_ALGORITHM: str = "HmacSHA1"
    OTP_POLICY_DIGITS: int = 6
    OTP_POLICY_PERIOD: int = 30
    OTP_POLICY_LOOK_AROUND: int = 1

    @field_validator("OTP_POLICY_ALGORITHM")
    @classmethod
    def check_otp_algorithm(cls, v: str) -> str:
        if v not in SUPPORTED_OTP_ALGORITHMS:
            raise ValueError(
                f"OTP_POLICY_ALGORITHM must be one of {', '.join(SUPPORTED_OTP_ALGORITHMS)}"
            )
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        # Extra fields in .env are ignored (prevents config injection)
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database (local development)."""
        return "sqlite" in self.DATABASE_URL.lower()

    @model_validator(mode="after")
    def check_production_secret_key(self) -> "Settings":
        """Tokens signed with the development key must never be accepted in production."""
        if self.is_production and self.SECRET_KEY == DEV_SECRET_KEY:
            raise ValueError("SECRET_KEY must be set when ENVIRONMENT is production")
        return self


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance.

    Using lru_cache ensures settings are only loaded once,
    providing consistent configuration across the application.
    """
    return Settings()


settings = get_settings()
