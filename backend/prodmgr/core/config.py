from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "sqlite:///./production_manager.db"
    log_level: str = "INFO"

    # Debug introspection routes (off unless explicitly enabled)
    debug_routes_enabled: bool = False
    debug_token: str = ""

    # Running API used by the client seeding script
    api_base_url: str = "http://localhost:3001"
    api_email: str = ""
    api_password: str = ""

    auth_rate_limit_max: int = 5
    auth_rate_limit_window_seconds: int = 15 * 60
    password_reset_rate_limit_max: int = 3
    password_reset_rate_limit_window_seconds: int = 60 * 60
    api_rate_limit_max: int = 100
    api_rate_limit_window_seconds: int = 15 * 60


settings = Settings()
