"""
Centralized configuration management.
All environment variables and settings are defined here.
"""
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = Field(default="SMS Ledger Ingestion Service", alias="APP_NAME")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8787, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    api_token: Optional[str] = Field(default=None, alias="API_TOKEN")

    # Ollama
    ollama_url: str = Field(..., alias="OLLAMA_URL")
    ollama_model: str = Field(default="mistral", alias="OLLAMA_MODEL")
    ollama_timeout: Optional[float] = Field(default=None, alias="OLLAMA_TIMEOUT")
    ollama_max_attempts: int = Field(default=1, alias="OLLAMA_MAX_ATTEMPTS")
    log_ollama_raw: bool = Field(default=False, alias="LOG_OLLAMA_RAW")

    # Actual Budget
    actual_server_url: str = Field(..., alias="ACTUAL_SERVER_URL")
    actual_password: str = Field(..., alias="ACTUAL_PASSWORD")
    actual_budget_id: str = Field(..., alias="ACTUAL_BUDGET_ID")
    actual_file_password: Optional[str] = Field(default=None, alias="ACTUAL_FILE_PASSWORD")
    actual_data_dir: str = Field(default="/tmp/actual-data", alias="ACTUAL_DATADIR")

    # Import
    import_notes_prefix: str = Field(default="SMS", alias="IMPORT_NOTES_PREFIX")
    import_id_prefix: str = Field(default="sms", alias="IMPORT_ID_PREFIX")
    timezone: str = Field(default="Asia/Kolkata", alias="TIMEZONE")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v_upper

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        """Validate port is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("ollama_max_attempts")
    @classmethod
    def validate_attempts(cls, v):
        """Validate inference attempt count."""
        if v < 1:
            raise ValueError("Ollama max attempts must be at least 1")
        if v > 5:
            raise ValueError("Ollama max attempts should not exceed 5")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v):
        """Validate timezone is a known IANA zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
