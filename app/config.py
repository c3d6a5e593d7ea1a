"""
Application Configuration
Uses Pydantic Settings for environment-based configuration
"""

from enum import Enum

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra env vars like MARIADB_* used by docker-compose
    )

    # Application
    PROJECT_NAME: str = "BlogIM API"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production)$")
    DEBUG: bool = Field(default=False)
    API_V1_STR: str = "/api/v1"
    SITE_NAME: str = "hutchybop.co.uk"

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS
    # Allow str because it can be a comma-separated string in .env
    CORS_ORIGINS: str | list[str] = Field(
        default=["http://localhost:5173", "http://localhost:8000"]
    )

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # Redis
    REDIS_URL: str = Field(default="redis://localhost:6379/0")

    # Review submission rate limiting
    REVIEW_RATE_LIMIT: int = 3
    REVIEW_RATE_WINDOW_MINUTES: int = 15

    # Spam scoring thresholds
    SPAM_FLAG_THRESHOLD: int = 3
    SPAM_BLOCK_THRESHOLD: int = 10

    # Reviews submitted without a logged in user are attributed to this account
    ANONYMOUS_USER_ID: int = 1
    ANONYMOUS_USERNAME: str = "anonymous"

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # Email (for notifications)
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_TLS: bool = False
    SMTP_STARTTLS: bool = True
    SMTP_FROM_EMAIL: str = "noreply@hutchybop.co.uk"
    SMTP_FROM_NAME: str = "BlogIM"
    ADMIN_EMAIL: str = "admin@hutchybop.co.uk"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    # Geo/IP lookup (used for notification text and visit tracking only)
    GEOIP_ENABLED: bool = False
    GEOIP_LOOKUP_URL: str = "http://ip-api.com/json/{ip}"
    GEOIP_TIMEOUT_SECONDS: float = 3.0

    # Visit tracking
    TRACKER_ENABLED: bool = True
    TRACKER_SKIP_PATHS: str | list[str] = Field(
        default=["/favicon.ico", "/stylesheets/", "/javascripts/", "/images/", "/manifest/"]
    )

    # Frontend URL (for email links, etc.)
    FRONTEND_URL: str = "http://localhost:3000"

    # Password reset links
    PASSWORD_RESET_EXPIRE_HOURS: int = 1

    # Proxies allowed to set X-Forwarded-For (comma-separated in .env)
    TRUSTED_PROXIES: str | list[str] = Field(default=["127.0.0.1", "::1"])

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("TRUSTED_PROXIES", mode="before")
    @classmethod
    def parse_trusted_proxies(cls, v: str | list[str]) -> list[str]:
        """Parse trusted proxy addresses from comma-separated string"""
        if isinstance(v, str):
            return [ip.strip() for ip in v.split(",") if ip.strip()]
        return v

    @field_validator("TRACKER_SKIP_PATHS", mode="before")
    @classmethod
    def parse_tracker_skip_paths(cls, v: str | list[str]) -> list[str]:
        """Parse tracker skip prefixes from comma-separated string"""
        if isinstance(v, str):
            return [path.strip() for path in v.split(",") if path.strip()]
        return v


# Create global settings instance

load_dotenv()
settings = Settings()  # type: ignore[call-arg]


class UserRole:
    """User role constants"""

    USER = "user"
    ADMIN = "admin"


class ReviewDisposition(str, Enum):
    """Outcome of moderating a submitted review"""

    ACCEPT = "accept"
    FLAG = "flag"
    BLOCK = "block"


class SpamPenalty:
    """Fixed penalties applied after the pattern categories are scored"""

    MIN_LENGTH = 10
    SHORT_CONTENT = 2

    MAX_LENGTH = 2000
    LONG_CONTENT = 1

    CAPS_RATIO = 0.5
    EXCESSIVE_CAPS = 2


class ReviewMessage:
    """Messages shown to the person submitting a review"""

    ACCEPTED = "Review submitted successfully!"
    HELD = "Review flagged for possible spam and sent for admin review"
