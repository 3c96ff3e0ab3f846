"""
Application Configuration

Centralized configuration management using Pydantic settings.
Handles environment variables, secrets, and scraper settings.
"""

from typing import List, Optional
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Sales Tracker"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    TESTING: bool = False

    # Security
    SECRET_KEY: str = Field("change-me-in-production", min_length=8)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    ALGORITHM: str = "HS256"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./sales_tracker.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10

    # Scraper
    SCRAPER_CACHE_DIR: Path = Path(".cache")
    SCRAPER_HEADLESS: bool = True
    SCRAPER_NAVIGATION_TIMEOUT: int = 30
    SCRAPER_MIN_DELAY: float = 2.0
    SCRAPER_MAX_DELAY: float = 4.0
    SCRAPER_SESSION_TTL_DAYS: Optional[int] = 30
    INTERACTIVE_LOGIN_TIMEOUT: int = 300

    # Deployment detection for browser launch flags
    RENDER: bool = False
    CHROME_EXECUTABLE_PATH: Optional[str] = None
    CHROMEDRIVER_PATH: Optional[str] = None

    # CORS - simplified to avoid parsing issues
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000"
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: str = "*"
    CORS_HEADERS: str = "*"

    @property
    def session_file(self) -> Path:
        """Session blob written by uploads and interactive login."""
        return self.SCRAPER_CACHE_DIR / "linkedin-session.json"

    @property
    def legacy_cookies_file(self) -> Path:
        """Cookies-only blob kept for older deployments."""
        return self.SCRAPER_CACHE_DIR / "linkedin-cookies.json"

    def get_cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    def get_cors_methods_list(self) -> List[str]:
        """Get CORS methods as a list."""
        if self.CORS_METHODS == "*":
            return ["*"]
        return [method.strip() for method in self.CORS_METHODS.split(",")]

    def get_cors_headers_list(self) -> List[str]:
        """Get CORS headers as a list."""
        if self.CORS_HEADERS == "*":
            return ["*"]
        return [header.strip() for header in self.CORS_HEADERS.split(",")]


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
