from functools import lru_cache
from typing import Any, Literal, Optional
import os

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Order Adaptor Service"
    VERSION: str = "0.1.0"
    DEBUG: bool = False

    # CORS settings
    BACKEND_CORS_ORIGINS: list[str] = ["*"]

    # Upstream commerce API
    COMMERCE_API_URL: str = "https://api.ekasicart.com"
    COMMERCE_API_TOKEN: Optional[str] = None

    # Two timeouts exist for the upstream client, both in milliseconds.
    # COMMERCE_TIMEOUT_SOURCE selects the one in effect.
    COMMERCE_API_TIMEOUT: int = 30000
    COMMERCE_CLIENT_TIMEOUT: int = 12000
    COMMERCE_TIMEOUT_SOURCE: Literal["client", "api"] = "client"

    HEALTH_CHECK_TIMEOUT: int = 5000  # milliseconds

    # Retries apply to GET requests only and are off by default
    MAX_RETRIES: int = 0
    RETRY_BACKOFF_FACTOR: float = 0.5

    # Order analytics returns zeroed counters instead of raising
    ANALYTICS_ZERO_ON_FAILURE: bool = True

    # Logging settings
    LOG_LEVEL: str = "INFO"
    ENABLE_STRUCTURED_LOGGING: bool = True
    LOG_UPSTREAM_REQUESTS: bool = False

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    @field_validator("MAX_RETRIES")
    @classmethod
    def validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("MAX_RETRIES cannot be negative")
        return v

    @property
    def commerce_timeout_seconds(self) -> float:
        """Upstream request timeout in seconds, from the selected source."""
        if self.COMMERCE_TIMEOUT_SOURCE == "api":
            return self.COMMERCE_API_TIMEOUT / 1000
        return self.COMMERCE_CLIENT_TIMEOUT / 1000

    @property
    def health_check_timeout_seconds(self) -> float:
        return self.HEALTH_CHECK_TIMEOUT / 1000


def load_env_file(env_file: str = ".env") -> None:
    """
    Load environment variables from specified .env file.

    Args:
        env_file: Path to the .env file. Defaults to ".env".
    """
    env_path = os.path.join(os.getcwd(), env_file)
    if os.path.exists(env_path):
        load_dotenv(env_path)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings with caching for efficiency.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
