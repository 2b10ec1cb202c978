"""Application configuration management."""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from sqlalchemy.engine.url import make_url, URL
from typing import Optional
import logging

SQLITE_LOCAL_URL = "sqlite+aiosqlite:///./contestvote.db"
MAX_INT32 = 2**31 - 1


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = SQLITE_LOCAL_URL
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Application
    environment: str = "development"
    app_base_url: str = "http://localhost:8000"
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Participant code names (CW001, CW002, ...)
    code_name_prefix: str = "CW"
    code_name_digits: int = 3

    # Votes
    admin_voter_name: str = "Admin"
    admin_reference_prefix: str = "VOTE_"
    vote_price: int = 50  # Major currency units per vote
    max_votes_per_record: int = 100_000

    # Media host (Cloudinary)
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "contest_participants"
    cloudinary_base_url: str = "https://api.cloudinary.com/v1_1"
    media_timeout_seconds: int = 30

    # Payment gateway (Paystack)
    paystack_secret_key: str = ""
    paystack_base_url: str = "https://api.paystack.co"
    payment_timeout_seconds: int = 30

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated origins from the environment."""
        return [item.strip() for item in self.allowed_origins.split(",") if item.strip()]

    @property
    def media_configured(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret)

    @property
    def payments_configured(self) -> bool:
        return bool(self.paystack_secret_key)

    @model_validator(mode="after")
    def validate_all_config(self):
        """Validate numeric settings and normalize Postgres URLs."""
        logger = logging.getLogger(__name__)

        if self.code_name_digits < 1:
            raise ValueError("code_name_digits must be at least 1")

        if not self.code_name_prefix:
            raise ValueError("code_name_prefix must not be empty")

        if self.vote_price < 1:
            raise ValueError("vote_price must be a positive amount")

        # votes.vote_count is a 32-bit INTEGER column
        if not 1 <= self.max_votes_per_record <= MAX_INT32:
            raise ValueError(f"max_votes_per_record must be between 1 and {MAX_INT32}")

        if self.environment == "production" and not self.payments_configured:
            logger.warning("PAYSTACK_SECRET_KEY is not set; payment-backed votes are disabled")

        # Database URL normalization
        url = self.database_url
        if not url:
            logger.warning("Empty DATABASE_URL, using SQLite fallback")
            self.database_url = SQLITE_LOCAL_URL
            return self

        parsed: Optional[URL] = None
        try:
            parsed = make_url(url)
        except Exception as e:  # pragma: no cover
            logger.error(f"Failed to parse DATABASE_URL: {e}")
            self.database_url = SQLITE_LOCAL_URL
            return self

        drivername = parsed.drivername
        if drivername.startswith("postgres") and "+asyncpg" not in drivername:
            parsed = parsed.set(drivername="postgresql+asyncpg")
            logger.info(f"Driver normalized: {drivername} -> {parsed.drivername}")

        # render_as_string re-encodes special characters in the password
        self.database_url = parsed.render_as_string(hide_password=False)
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
