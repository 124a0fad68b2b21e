from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Application
    app_name: str = "hop-service"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Database
    database_url: str = "sqlite:///./hop.db"

    # Link keys
    base_url: str = "http://127.0.0.1:8000"
    key_length: int = 7
    max_key_attempts: int = 5

    # Cache settings
    cache_backend: str = "redis"  # Options: "redis", "memory", "none"
    redis_url: str = "redis://localhost:6379/0"
    cache_timeout: float = 0.5  # Seconds, applies to connect and every command

    # API key gate
    # Exempt paths match exactly (query string ignored); there is no prefix
    # or pattern form, so public /{key} redirects cannot be exempted here.
    api_key: str = "change-me"
    api_key_header: str = "X-Api-Key"
    auth_exempt_paths: List[str] = ["/health", "/info"]

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
