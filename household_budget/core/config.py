# config.py
"""
Configuration module for the application.
Handles environment-specific settings using Pydantic v2 and pydantic-settings.
"""
from typing import Optional
from enum import Enum
from pydantic import Field, field_validator, model_validator, BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[request_id]} | {name}:{function}:{line} | {message}"
    file_enabled: bool = False
    file_path: str = "logs/app.log"

class APISettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    prefix: str = "/api"
    version: str = "1.0.0"
    title: str = "Household Budget API"
    description: str = "Budget tracking and analytics for household spending limits"

class DatabaseSettings(BaseModel):
    url: str
    pool_size: int = 20
    max_overflow: int = 30
    pool_recycle: int = 3600

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

class BudgetSettings(BaseModel):
    """Thresholds (in percent of the budget amount) and paging defaults."""
    near_limit_threshold: float = 80.0
    critical_threshold: float = 90.0
    over_budget_threshold: float = 100.0
    default_page_size: int = 20
    max_page_size: int = 100

class Settings(BaseSettings):
    """Main settings class with environment-specific configurations."""
    # Environment
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # API
    api_title: str = "Household Budget API"
    api_description: str = "Budget tracking and analytics for household spending limits"
    api_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./household_budget.db"
    pool_size: int = 20
    max_overflow: int = 30
    pool_recycle: int = 3600

    # Logging
    log_level: str = "INFO"
    log_format: str = Field(default="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[request_id]} | {name}:{function}:{line} | {message}")
    log_file_enabled: bool = False
    log_file_path: str = "logs/app.log"

    # Budget engine
    budget_near_limit_threshold: float = 80.0
    budget_critical_threshold: float = 90.0
    budget_over_budget_threshold: float = 100.0
    budget_default_page_size: int = 20
    budget_max_page_size: int = 100

    # Validators
    @field_validator("debug")
    @classmethod
    def debug_not_in_production(cls, v, info):
        env = info.data.get("environment")
        if v and env == Environment.PRODUCTION:
            raise ValueError("Debug mode should not be enabled in production")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        if not v.startswith(("postgresql://", "postgresql+asyncpg://", "sqlite+aiosqlite://")):
            raise ValueError("Invalid database URL format")
        return v

    @model_validator(mode="after")
    def thresholds_ascending(self):
        if not (
            0 < self.budget_near_limit_threshold
            <= self.budget_critical_threshold
            <= self.budget_over_budget_threshold
        ):
            raise ValueError("Budget thresholds must satisfy 0 < near_limit <= critical <= over_budget")
        return self

    # Sub-settings via properties
    @property
    def api(self) -> APISettings:
        return APISettings(
            host=self.host,
            port=self.port,
            title=self.api_title,
            description=self.api_description,
            version=self.api_version,
        )

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings(
            level=self.log_level,
            format=self.log_format,
            file_enabled=self.log_file_enabled,
            file_path=self.log_file_path,
        )

    @property
    def database(self) -> DatabaseSettings:
        return DatabaseSettings(
            url=self.database_url,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            pool_recycle=self.pool_recycle,
        )

    @property
    def budget(self) -> BudgetSettings:
        return BudgetSettings(
            near_limit_threshold=self.budget_near_limit_threshold,
            critical_threshold=self.budget_critical_threshold,
            over_budget_threshold=self.budget_over_budget_threshold,
            default_page_size=self.budget_default_page_size,
            max_page_size=self.budget_max_page_size,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

class DevelopmentSettings(Settings):
    debug: bool = True
    log_level: str = "DEBUG"

class ProductionSettings(Settings):
    debug: bool = False
    log_level: str = "INFO"

    @field_validator("database_url")
    @classmethod
    def validate_production_database(cls, v):
        if v.startswith("sqlite"):
            raise ValueError("SQLite is not supported in production")
        return v

class TestingSettings(Settings):
    database_url: str = "sqlite+aiosqlite:///:memory:"
    debug: bool = True
    log_level: str = "DEBUG"

def get_settings(environment: Optional[Environment] = None) -> Settings:
    """Factory to return environment-specific settings."""
    env = environment or Settings().environment
    if env == Environment.PRODUCTION:
        return ProductionSettings()
    elif env == Environment.TESTING:
        return TestingSettings()
    return DevelopmentSettings()

# Global settings instance
settings = get_settings()
