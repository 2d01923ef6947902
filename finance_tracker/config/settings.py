"""
Configuration Management for the Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The tracker has no external services, so this only covers runtime
behaviour (feed limits, demo seeding, password hashing cost).
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


TIME_FRAME_CHOICES = ("7days", "30days", "90days", "year")


class DemoSettings(BaseSettings):
    """Credentials and profile of the seeded demo user."""

    model_config = SettingsConfigDict(
        env_prefix="DEMO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    username: str = Field(
        default="demo",
        min_length=3,
        description="Username of the demo account"
    )
    password: str = Field(
        default="password",
        min_length=6,
        description="Plain-text password for the demo account"
    )
    email: str = Field(
        default="demo@example.com",
        description="Email of the demo account"
    )
    name: str = Field(
        default="Demo User",
        description="Display name of the demo account"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Dashboard behaviour
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=100,
        description="How many transactions the recent feed shows"
    )
    default_time_frame: str = Field(
        default="7days",
        description="Time frame used when the feed is requested without one"
    )

    # Startup
    seed_demo_data: bool = Field(
        default=True,
        description="Populate the demo dataset when the app starts"
    )

    # Security
    password_hash_rounds: int = Field(
        default=12,
        ge=4,
        le=16,
        description="bcrypt cost factor"
    )

    @field_validator('default_time_frame')
    @classmethod
    def validate_time_frame(cls, v: str) -> str:
        """Only accept the known time-frame shortcuts."""
        if v not in TIME_FRAME_CHOICES:
            raise ValueError(
                f"Unknown time frame: {v}. Allowed: {', '.join(TIME_FRAME_CHOICES)}"
            )
        return v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def app(self) -> AppSettings:
        return AppSettings()

    @property
    def demo(self) -> DemoSettings:
        return DemoSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a
    "<name>_error" entry for each section that failed.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    try:
        _ = settings.demo
        results["demo"] = True
    except Exception as e:
        results["demo"] = False
        results["demo_error"] = str(e)

    return results
