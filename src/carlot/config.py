"""
Application configuration using Pydantic-Settings.
Every setting can be overridden through CARLOT_* environment variables or a .env file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage
    data_dir: Path = Path("Data")
    dealers_file: str = "Dealers.json"
    session_file: str = "Session.json"

    # Logging
    log_level: str = "INFO"
    log_file: str = "carlot.log"

    # Display
    history_display_limit: int = 5

    model_config = SettingsConfigDict(env_prefix="CARLOT_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def dealers_path(self) -> Path:
        return self.data_dir / self.dealers_file

    @property
    def session_path(self) -> Path:
        return self.data_dir / self.session_file

    @property
    def log_path(self) -> Path:
        return self.data_dir / self.log_file


def load_settings(**overrides: Any) -> Settings:
    """Build settings from the environment, letting explicit non-None overrides win."""
    values = {key: value for key, value in overrides.items() if value is not None}
    return Settings(**values)
