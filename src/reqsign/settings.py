"""Signing configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings"]


class Settings(BaseSettings):
    """Signing configuration, read from REQSIGN_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="REQSIGN_")

    # Credential
    access_key_id: str = ""
    secret_key: str = ""

    # Maximum request age in seconds; <= 0 disables expiry enforcement
    expiry_window_seconds: int = 3600

    # Client side: validate signed responses
    verify_responses: bool = True

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True
