"""
config.py — Centralized Application Configuration Loader

Purpose:
- Define a single source of truth for application settings.
- Load and validate environment variables from `.env` or OS environment.

Settings groups:
- API surface (prefix, CORS, logging level)
- Google Sheets datastore (spreadsheet id + service account credentials)
- Outgoing mail for admin notifications (SMTP)

This module does NOT:
- Open any connection to Google Sheets or the mail server.
- Make external API calls.
- Modify runtime settings.
"""

from pathlib import Path
from typing import Any, List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/app/core/config.py
# .env should be at: backend/.env
_CONFIG_DIR = Path(__file__).parent  # backend/app/core
_BACKEND_DIR = _CONFIG_DIR.parent.parent  # backend
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    _ENV_FILE_PATH = str(_ENV_FILE.resolve())
else:
    # Fallback: use relative path (pydantic will look in CWD)
    _ENV_FILE_PATH = ".env"


class Settings(BaseSettings):
    """
    Settings container for the order backend.

    Every field has a default so the app (and the test-suite) can start
    without a `.env`. Endpoints that need the spreadsheet fail at request
    time when it is not configured.
    """
    APP_NAME: str = Field(
        "Construction Order Backend",
        description="Title shown in the OpenAPI docs",
    )
    API_PREFIX: str = Field(
        "/api",
        description="Path prefix every router is mounted under",
    )
    LOG_LEVEL: str = Field(
        "INFO",
        description="Root logging level",
    )
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )

    # Google Sheets - Required for every data endpoint
    GOOGLE_SPREADSHEET_ID: str = Field(
        "",
        description="ID of the spreadsheet holding users / orders / order_items / construction_items",
    )
    GOOGLE_SHEETS_CLIENT_EMAIL: str = Field(
        "",
        description="Service account e-mail the spreadsheet is shared with",
    )
    GOOGLE_SHEETS_PRIVATE_KEY: str = Field(
        "",
        description="PEM private key of the service account (literal \\n sequences allowed)",
    )
    GOOGLE_SHEETS_TIMEOUT_SECONDS: int = Field(
        30,
        description="HTTP timeout for Sheets API requests (seconds)",
    )

    # Mail - Optional; key arrival mails are skipped when unset
    EMAIL_HOST: str = Field(
        "smtp.gmail.com",
        description="SMTP host",
    )
    EMAIL_PORT: int = Field(
        587,
        description="SMTP port",
    )
    EMAIL_USE_TLS: bool = Field(
        True,
        description="Issue STARTTLS after connecting",
    )
    EMAIL_USER: str = Field(
        "",
        description="SMTP login user",
    )
    EMAIL_PASS: str = Field(
        "",
        description="SMTP login password",
    )
    EMAIL_FROM: str = Field(
        "",
        description="From address (defaults to EMAIL_USER)",
    )
    ADMIN_DASHBOARD_URL: str = Field(
        "http://localhost:3001/admin",
        description="Link placed in notification mails",
    )

    @field_validator('GOOGLE_SHEETS_PRIVATE_KEY', mode='before')
    @classmethod
    def unescape_private_key(cls, v: Any) -> str:
        """Keys pasted into .env usually carry escaped newlines."""
        if isinstance(v, str):
            return v.replace("\\n", "\n").strip()
        return v or ""

    @model_validator(mode='after')
    def default_sender(self) -> 'Settings':
        if not self.EMAIL_FROM:
            self.EMAIL_FROM = self.EMAIL_USER
        return self

    @property
    def sheets_configured(self) -> bool:
        return bool(
            self.GOOGLE_SPREADSHEET_ID
            and self.GOOGLE_SHEETS_CLIENT_EMAIL
            and self.GOOGLE_SHEETS_PRIVATE_KEY
        )

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Singleton pattern — settings imported anywhere will reference same object.
settings = Settings()
