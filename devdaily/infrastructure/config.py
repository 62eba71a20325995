"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    app_name: str = "DevDaily"
    api_version: str = "0.1.0"
    environment: str = "development"
    debug: bool = False

    # Storage
    database_url: str = "postgresql+asyncpg://devdaily:devdaily_dev_password@db:5432/devdaily"
    storage_backend: str = "memory"

    # Authentication
    token_ttl_seconds: int = 86400
    remember_me_ttl_seconds: int = 30 * 86400
    admin_cookie_name: str = "admin_token"
    max_login_attempts: int = 5
    bcrypt_rounds: int = 12
    default_admin_username: str = "admin"
    default_admin_email: str = "admin@devdaily.local"
    default_admin_password: str = "change-me-please"

    # Uploads and link checks
    upload_root: str = "uploads"
    link_check_timeout: float = 5.0

    # Bulk actions
    bulk_max_items: int = 1000

    # Demo data
    seed_demo_data: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def uses_database(self) -> bool:
        return self.storage_backend.lower() == "database"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
