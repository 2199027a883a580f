"""
Retail Sales Reports
Centralized Configuration Management

Configuration is read from environment variables (and an optional .env file)
using Pydantic settings, grouped into one section per subsystem.
"""

from datetime import date
from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Backing database configuration"""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    url: str = Field(default="sqlite:///retail_reports.db", description="SQLAlchemy database URL")
    echo: bool = Field(default=False, description="Echo SQL queries")


class DataSettings(BaseSettings):
    """Dataset source configuration"""

    model_config = SettingsConfigDict(env_prefix="DATA_")

    source: str = Field(default="csv", description="Where the CLI reads the dataset: csv or db")
    dir: str = Field(default="./data", description="Directory holding the dataset CSV files")
    date_format: str = Field(default="%Y-%m-%d", description="strptime format of date columns")

    # File names
    stores_file: str = Field(default="stores.csv", description="Stores file")
    category_file: str = Field(default="category.csv", description="Category file")
    products_file: str = Field(default="products.csv", description="Products file")
    sales_file: str = Field(default="sales.csv", description="Sales file")
    warranty_file: str = Field(default="warranty.csv", description="Warranty claims file")

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        """Validate dataset source"""
        allowed = ["csv", "db"]
        if v.lower() not in allowed:
            raise ValueError(f"Data source must be one of: {allowed}")
        return v.lower()

    def file_for(self, relation: str) -> str:
        """File name configured for a relation"""
        return getattr(self, f"{relation}_file")


class ReportSettings(BaseSettings):
    """Report execution configuration"""

    model_config = SettingsConfigDict(env_prefix="REPORTS_")

    reference_date: Optional[date] = Field(
        default=None,
        description="Date treated as 'today' by relative-date reports (defaults to the current date)",
    )
    max_workers: int = Field(default=4, description="Threads used when running reports concurrently")
    output_dir: str = Field(default="./reports", description="Directory for exported report files")
    output_format: str = Field(default="csv", description="Export format: csv or json")

    @field_validator("output_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate export format"""
        allowed = ["csv", "json"]
        if v.lower() not in allowed:
            raise ValueError(f"Output format must be one of: {allowed}")
        return v.lower()


class MonitoringSettings(BaseSettings):
    """Logging configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="console", alias="LOG_FORMAT", description="Log format: json or console")


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
    app_name: str = Field(default="retail-reports", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    data: DataSettings = Field(default_factory=DataSettings)
    reports: ReportSettings = Field(default_factory=ReportSettings)
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


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
