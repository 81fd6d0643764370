"""
Configuration module for the MediSys patient service.
Uses Pydantic BaseSettings for validation - app fails fast if config is malformed.
"""
import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with validation.
    Values come from the environment or a local .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database Configuration
    medisys_db_dir: str = Field(default="data", description="Database directory")
    medisys_db_file: str = Field(default="medisys.db", description="Database filename")
    medisys_db_busy_timeout: int = Field(default=5000, ge=0, description="SQLite busy timeout in milliseconds")

    # API Configuration
    medisys_host: str = Field(default="127.0.0.1", description="API host")
    medisys_port: int = Field(default=8000, description="API port")
    medisys_reload: bool = Field(default=False, description="Enable hot reload")

    # Logging Configuration
    medisys_log_level: str = Field(default="INFO", description="Root log level")
    medisys_log_format: str = Field(default="json", description="Log format: json or text")

    @field_validator("medisys_log_format")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        """Only json and text formatters exist."""
        value = value.lower()
        if value not in ("json", "text"):
            raise ValueError("medisys_log_format must be 'json' or 'text'")
        return value

    @property
    def database_path(self) -> str:
        """Get the full database path."""
        return str(Path(self.medisys_db_dir) / self.medisys_db_file)

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        Path(self.medisys_db_dir).mkdir(parents=True, exist_ok=True)


# Create global settings instance - fails fast if config is malformed
settings = Settings()

# Backwards-compatible exports for existing code
DATABASE_PATH = settings.database_path
DATABASE_BUSY_TIMEOUT = settings.medisys_db_busy_timeout

API_HOST = settings.medisys_host
API_PORT = settings.medisys_port
API_RELOAD = settings.medisys_reload
