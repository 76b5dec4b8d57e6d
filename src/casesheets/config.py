import os
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from casesheets.exceptions import ConfigError

# Compiled-in spreadsheet layout. Not runtime-configurable.
SPREADSHEET_ID = "1WrIqNjnY6yy9UTiDY2Q1kbMk6Rx1EOnQLq1HSAOkjr8"
CASES_SHEET = "BD"
LOCATIONS_SHEET = "Ubicaciones"

DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class AppSettings(BaseSettings):
    name: str = "Case Sheets"
    version: str = "1.0.0"


class GoogleSettings(BaseSettings):
    """
    Service-account credentials are read from GOOGLE_CREDENTIALS as a single JSON blob.
    """
    model_config = SettingsConfigDict(env_prefix="GOOGLE_", env_file=".env", extra="ignore")

    credentials: Optional[str] = None
    scopes: list[str] = ["https://www.googleapis.com/auth/spreadsheets"]
    timeout_seconds: float = 30.0


class SecuritySettings(BaseSettings):
    cors_origins: list[str] = ["*"]
    max_body_mb: int = 10  # Content-Length guard for JSON bodies


class LoggingSettings(BaseSettings):
    log_requests: bool = True
    level: str = "INFO"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_nested_delimiter="__", env_file=".env", extra="ignore")
    app: AppSettings = AppSettings()
    google: GoogleSettings = GoogleSettings()
    security: SecuritySettings = SecuritySettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """
        Builds settings from a YAML file; its values take precedence over env vars and .env.

        The file is config_path, else $CASESHEETS_CONFIG, else config/settings.yaml
        when present. See config/settings.example.yaml for the layout.
        """
        explicit = config_path or os.getenv("CASESHEETS_CONFIG")
        path = Path(explicit) if explicit else DEFAULT_CONFIG_PATH
        if not path.exists():
            if explicit:
                raise ConfigError(f"Settings file not found: {path}")
            return cls()

        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Settings file {path} must contain a mapping.")
        return cls(**data)


settings = Settings.load()
