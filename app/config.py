"""
Configuration Management

Uses Pydantic BaseSettings to load configuration from environment variables.
All settings can be overridden via .env file or environment variables.

Environment Variables:
    APP_ENV: Environment name (development/staging/production)
    DEBUG: Enable debug mode (default: False)
    ANTHROPIC_API_KEY: Enables the model-backed clinical assistant
    SEARCH_WINDOW_DAYS: Days scanned by the appointment finder (default: 7)
    SLOT_DURATION_MINUTES: Length of one appointment slot (default: 30)
"""

from datetime import time
from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Environment
    app_env: Literal["development", "staging", "production"] = "development"
    """Current application environment.

    Options:
    - development: Local development, verbose logging, docs enabled
    - staging: Pre-production testing environment
    - production: Live production environment, minimal logging
    """

    debug: bool = False
    """Enable debug mode.

    When True:
    - Detailed error messages in responses
    - DEBUG log level
    """

    # Application Configuration
    app_name: str = "clinic-scheduler"
    """Application name."""

    host: str = "0.0.0.0"
    """Host to bind the application server."""

    port: int = 8000
    """Port to bind the application server."""

    # CORS Configuration
    cors_origins: str = "http://localhost:5173"
    """Comma-separated list of allowed CORS origins."""

    # Clinical Assistant (Claude)
    anthropic_api_key: Optional[str] = None
    """Anthropic API key.

    When unset the assistant endpoints answer from the local
    rules-based extractors only.
    """

    claude_model: str = "claude-3-5-haiku-20241022"
    """Primary model for notes analysis and form filling."""

    claude_fallback_model: str = "claude-3-5-sonnet-20241022"
    """Model tried once when the primary model call fails."""

    claude_timeout_seconds: float = 20.0
    """Request timeout for a single Claude call."""

    # Appointment Finder
    search_window_days: int = 7
    """Number of consecutive calendar days scanned from the target date."""

    slot_duration_minutes: int = 30
    """Length of one appointment slot and the spacing of the slot grid."""

    first_slot: time = time(8, 0)
    """Start time of the first bookable slot of the day."""

    last_slot: time = time(17, 0)
    """Start time of the last bookable slot of the day (inclusive)."""

    perfect_match_threshold: float = 90.0
    """Slots scoring strictly above this value are perfect matches."""

    max_perfect_matches: int = 3
    """Maximum number of perfect matches returned."""

    max_close_matches: int = 5
    """Maximum number of close matches returned."""

    # Pydantic configuration
    model_config = SettingsConfigDict(
        env_file=".env",  # Load from .env file if it exists
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow APP_ENV or app_env
        extra="ignore",  # Ignore extra environment variables
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @property
    def cors_origins_list(self) -> list[str]:
        """Split cors_origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def assistant_enabled(self) -> bool:
        """Check if the model-backed assistant can be used."""
        return bool(self.anthropic_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once and reused
    across the application.

    Returns:
        Settings: Cached settings instance

    Example:
        >>> from app.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.search_window_days)
        7
    """
    return Settings()


# Module-level settings instance for easy imports
settings = get_settings()
