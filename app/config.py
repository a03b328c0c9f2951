from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Project Info
    PROJECT_NAME: str = "SafeKey API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = Field(default="development", description="Environment: development, staging, production")

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./data/safekey.db",
        description="Database URL (SQLite or PostgreSQL)"
    )
    DB_POOL_SIZE: int = Field(default=5, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(default=10, description="Database max overflow connections")
    DB_POOL_TIMEOUT: int = Field(default=30, description="Database pool timeout in seconds")
    DB_POOL_RECYCLE: int = Field(default=3600, description="Database pool recycle time in seconds")

    # Security - JWT
    SECRET_KEY: str = Field(..., description="Secret key for JWT token generation")
    ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60, description="JWT token expiration in minutes")
    PASSWORD_MIN_LENGTH: int = Field(default=8, description="Minimum password length on sign-up")

    @field_validator('SECRET_KEY')
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        if len(v) < 32:
            raise ValueError('SECRET_KEY must be at least 32 characters')
        return v

    # Demo account
    DEMO_USER_ENABLED: bool = Field(default=True, description="Allow sign-in with the shared demo account")
    DEMO_USER_EMAIL: str = Field(default="demo@example.com", description="Demo account email")
    DEMO_USER_PASSWORD: str = Field(default="demo@2025", description="Demo account password")

    # Security - CORS
    BACKEND_CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )
    MAX_REQUEST_SIZE: int = Field(default=1048576, description="Max request body size in bytes (default 1MB)")

    # Keys
    KEYS_PER_PAGE: int = Field(default=8, description="Default page size for the key listing")
    MAX_KEYS_PER_PAGE: int = Field(default=100, description="Largest page size a client may request")
    OPENAI_KEY_PREFIX: str = Field(default="sk-", description="Secret prefix identifying OpenAI keys")
    OPENAI_KEY_EXPIRATION_MONTHS: int = Field(default=3, description="Default lifetime of OpenAI keys in months")

    # External APIs - provider key validation
    PROVIDER_VALIDATION_ENABLED: bool = Field(default=True, description="Enable live provider key validation")
    OPENAI_API_URL: str = Field(default="https://api.openai.com/v1", description="OpenAI API base URL")
    PROVIDER_API_TIMEOUT: int = Field(default=10, description="Provider API timeout in seconds")

    # Server Configuration
    WORKERS: int = Field(default=4, description="Number of Uvicorn workers")
    HOST: str = Field(default="0.0.0.0", description="Server host")
    PORT: int = Field(default=8000, description="Server port")

    # Event stream
    EVENT_STREAM_KEEPALIVE_SECONDS: int = Field(default=15, description="Seconds between SSE keep-alive comments")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    LOG_DIR: str = Field(default="./logs", description="Directory for log files")
    LOG_RETENTION_DAYS: int = Field(default=30, description="Number of days to keep log files")
    LOG_MASK_SENSITIVE: bool = Field(default=True, description="Enable sensitive data masking in logs")
    LOG_ENABLE_REQUEST_LOGGING: bool = Field(default=True, description="Enable HTTP request/response logging")

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable rate limiting")
    RATE_LIMIT_DEFAULT: str = Field(default="100/minute", description="Default rate limit")
    RATE_LIMIT_AUTH: str = Field(default="5/minute", description="Rate limit for auth endpoints")
    RATE_LIMIT_VALIDATION: str = Field(default="10/minute", description="Rate limit for provider key validation")
    RATE_LIMIT_STORAGE_URI: str = Field(default="memory://", description="Rate limit storage URI")

    # Circuit Breaker
    CIRCUIT_BREAKER_FAILURE_THRESHOLD: int = Field(default=5, description="Failures before circuit opens")
    CIRCUIT_BREAKER_RECOVERY_TIMEOUT: int = Field(default=30, description="Seconds before attempting reset")
    CIRCUIT_BREAKER_HALF_OPEN_MAX_CALLS: int = Field(default=3, description="Max calls in half-open state")

    def get_log_level(self) -> str:
        """Get log level based on environment."""
        if self.ENVIRONMENT.lower() in ["development", "dev", "test"]:
            return "DEBUG"
        return self.LOG_LEVEL.upper()


settings = Settings()
