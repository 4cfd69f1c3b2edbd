"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./finance_coach.db"
    auto_create_tables: bool = True

    # Service
    service_name: str = "finance-coach"
    log_level: str = "INFO"

    # Demo account: every record belongs to this owner unless told otherwise
    default_owner_id: int = 1

    # Analytics endpoints
    renewal_window_days: int = 30
    trend_months: int = 6


settings = Settings()
