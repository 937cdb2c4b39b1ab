"""
Configuration settings for the Care Booking Engine
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # API Settings
    app_name: str = "Care Booking Engine"
    app_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 3001
    debug: bool = False
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Database Settings
    database_url: str = "postgresql://localhost:5432/childcare"
    db_pool_min_size: int = 5
    db_pool_max_size: int = 20
    db_command_timeout: float = 30.0  # seconds
    db_application_name: str = "booking-service"
    db_apply_schema: bool = False  # run schema.sql on startup

    # Logging Settings
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = True
    verbose_logging: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()


# Global settings instance
settings = Settings()


@lru_cache()
def get_settings() -> Settings:
    """Get application settings (cached)"""
    return settings


# Booking statuses accepted by the status endpoint
BOOKING_STATUSES = ("DRAFT", "PENDING", "PARTIAL", "CONFIRMED", "CANCELLED")

# Statuses a center may answer a booking day with
CENTER_RESPONSE_STATUSES = ("ACCEPTED", "DECLINED")
