"""
Retail Insights Analytics Engine
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalyticsSettings(BaseSettings):
    """Aggregation defaults and thresholds"""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    timezone: str = Field(default="UTC", description="Zone used for calendar days and buckets")

    # Rankings
    top_n: int = Field(default=5, ge=1, description="Default Top-N for ranked lists")
    location_top_n: int = Field(default=5, ge=1, description="Locations kept before the Others rollup")
    customer_location_top_n: int = Field(default=6, ge=1, description="Locations in the customer breakdown")

    # Inventory
    stock_cover_days: int = Field(default=30, ge=1, description="Trailing days used for average daily sales")
    default_low_stock_threshold: int = Field(default=5, ge=0, description="Per-product threshold when none is stored")
    global_low_stock_enabled: bool = Field(default=False, description="Apply the global threshold to every product")
    global_low_stock_threshold: int = Field(default=5, ge=0, description="Global low stock threshold")

    # Discontinue candidates
    discontinue_min_stock: int = Field(default=5, ge=0, description="Minimum stock for a discontinue candidate")
    discontinue_limit: int = Field(default=50, ge=1, description="Max discontinue candidates returned")

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate the IANA zone name"""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")
    log_file: Optional[str] = Field(default=None, description="Log file path")


class QualitySettings(BaseSettings):
    """Snapshot Quality Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    enable_snapshot_validation: bool = Field(
        default=True,
        alias="ENABLE_SNAPSHOT_VALIDATION",
        description="Run contract checks on loaded snapshots"
    )


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="retail-insights", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    quality: QualitySettings = Field(default_factory=QualitySettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
