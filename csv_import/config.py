"""Application configuration loaded from environment variables."""

from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Central configuration for the CSV import client."""

    # Import service
    api_base_url: str = Field(default="http://localhost:3000", description="Import service base URL")
    api_version: str = Field(default="v1", description="API version segment")
    api_access_token: str = Field(default="", description="Bearer token, empty to send no auth header")
    request_timeout: float = Field(default=30.0, description="Per-request timeout in seconds")

    # Polling
    poll_interval_ms: int = Field(default=1000, ge=0, description="Delay between status fetches")
    poll_timeout: Optional[float] = Field(
        default=None, description="Overall polling deadline in seconds, unbounded when unset"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    log_json: bool = Field(default=True, description="Render log lines as JSON")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "case_sensitive": False}


# Singleton instance
settings = Settings()
