"""
Configuration Management for MarketLens
Centralized settings with environment variable loading and validation
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Dict, Any
from pathlib import Path
from enum import Enum


class Environment(str, Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings with validation"""

    # Environment
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment"
    )

    # Database
    DATABASE_URL: str = Field(
        default="sqlite:///data/marketlens.db",
        description="SQLite database URL"
    )
    DATABASE_ECHO: bool = Field(
        default=False,
        description="Echo SQL queries (debug mode)"
    )

    # Queries
    QUERY_TTL_HOURS: int = Field(
        default=24,
        ge=1,
        le=24 * 365,
        description="Lifetime of a query when expires_at is not supplied"
    )
    STRICT_STATUS_TRANSITIONS: bool = Field(
        default=False,
        description="Reject status updates outside pending -> processing -> completed/failed"
    )

    # Expiry sweep
    CLEANUP_INTERVAL_MINUTES: int = Field(
        default=0,
        ge=0,
        le=24 * 60,
        description="Minutes between automatic expiry sweeps (0 disables)"
    )
    SCHEDULER_TIMEZONE: str = Field(
        default="UTC",
        description="Scheduler timezone"
    )

    # API
    API_HOST: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    API_PORT: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API server port"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    API_CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # Logging
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level"
    )
    LOG_FILE: str = Field(
        default="data/logs/marketlens.log",
        description="Log file path"
    )
    LOG_MAX_BYTES: int = Field(
        default=10_485_760,  # 10MB
        description="Maximum log file size in bytes"
    )
    LOG_BACKUP_COUNT: int = Field(
        default=5,
        description="Number of log backup files to keep"
    )

    # Paths
    DATA_DIR: str = Field(
        default="data",
        description="Data directory path"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Ensure database URL is valid SQLite"""
        if not v.startswith("sqlite:///"):
            raise ValueError("DATABASE_URL must start with 'sqlite:///'")
        return v

    @field_validator("LOG_FILE", "DATA_DIR")
    @classmethod
    def create_directories(cls, v: str) -> str:
        """Create directories if they don't exist"""
        path = Path(v)
        if v.endswith(".log"):
            path = path.parent
        path.mkdir(parents=True, exist_ok=True)
        return v

    def get_database_url_async(self) -> str:
        """Get async database URL for SQLAlchemy"""
        return self.DATABASE_URL.replace("sqlite:///", "sqlite+aiosqlite:///")

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary"""
        return self.model_dump()


# Create global settings instance
settings = Settings()
