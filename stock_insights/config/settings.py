"""
Inventory Classification Service
Centralized Configuration Management

Classification thresholds, reporting API access, and logging are configured
through Pydantic settings with environment variable support and validation.
"""

from functools import lru_cache
from typing import Optional, List
from pydantic import Field, field_validator, model_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClassificationSettings(BaseSettings):
    """Classification thresholds"""

    model_config = SettingsConfigDict(env_prefix="CLASSIFICATION_")

    # ABC tiers, cumulative percentage of total revenue (upper edge inclusive)
    abc_a_threshold: float = Field(default=20.0, description="Cumulative % upper bound for class A")
    abc_b_threshold: float = Field(default=80.0, description="Cumulative % upper bound for class B")

    # XYZ tiers, coefficient of variation (upper edge inclusive)
    xyz_x_threshold: float = Field(default=0.5, description="Variability upper bound for class X")
    xyz_y_threshold: float = Field(default=1.0, description="Variability upper bound for class Y")

    # Dead-stock risk
    dead_stock_high_days: int = Field(default=120, description="Days without sale for HIGH risk")
    dead_stock_medium_days: int = Field(default=60, description="Days without sale for MEDIUM risk")
    high_value_threshold: float = Field(default=20000.0, description="Stock value separating discount from bulk sale")

    # Reorder urgency
    urgency_high_days: int = Field(default=7, description="Max days until stockout for HIGH urgency")
    urgency_medium_days: int = Field(default=21, description="Max days until stockout for MEDIUM urgency")
    stockout_horizon_days: int = Field(default=999, description="Projection cap when there is no demand")

    @model_validator(mode="after")
    def validate_ordering(self) -> "ClassificationSettings":
        """Validate that tier boundaries are ascending"""
        if not 0 <= self.abc_a_threshold <= self.abc_b_threshold <= 100:
            raise ValueError("ABC thresholds must satisfy 0 <= A <= B <= 100")
        if not 0 <= self.xyz_x_threshold <= self.xyz_y_threshold:
            raise ValueError("XYZ thresholds must satisfy 0 <= X <= Y")
        if not 0 < self.dead_stock_medium_days <= self.dead_stock_high_days:
            raise ValueError("Dead-stock thresholds must satisfy 0 < MEDIUM <= HIGH")
        if not 0 <= self.urgency_high_days <= self.urgency_medium_days <= self.stockout_horizon_days:
            raise ValueError("Urgency thresholds must satisfy 0 <= HIGH <= MEDIUM <= horizon")
        return self


class ReportingApiSettings(BaseSettings):
    """Reporting API Configuration"""

    model_config = SettingsConfigDict(env_prefix="REPORTING_API_")

    base_url: str = Field(default="http://localhost:8080", description="Reporting API base URL")
    inventory_path: str = Field(
        default="/api/v1/reports/inventory/analysis",
        description="Inventory analysis endpoint path",
    )
    timeout_seconds: float = Field(default=10.0, description="Request timeout in seconds")
    api_token: Optional[SecretStr] = Field(default=None, description="Bearer token")

    @property
    def inventory_url(self) -> str:
        """Full inventory analysis URL"""
        return f"{self.base_url.rstrip('/')}/{self.inventory_path.lstrip('/')}"


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")

    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format value"""
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


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
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="stock-insights", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")
    api_workers: int = Field(default=4, alias="API_WORKERS", description="API workers")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        alias="CORS_ORIGINS",
        description="Allowed CORS origins",
    )

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    classification: ClassificationSettings = Field(default_factory=ClassificationSettings)
    reporting_api: ReportingApiSettings = Field(default_factory=ReportingApiSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

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
