"""Project configuration and paths.

Loads settings from config/settings.yaml, then applies environment
overrides (including values from the project's .env file).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_BASE_URL = "http://localhost:1337"


def normalize_base_url(url: str) -> str:
    """Ensure the backend URL has a scheme and no trailing slash."""
    url = (url or DEFAULT_BASE_URL).strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url.rstrip("/")


class CMSSettings(BaseModel):
    """Connection settings for the headless CMS backend."""
    base_url: str = DEFAULT_BASE_URL
    api_token: str = ""
    admin_email: str = ""
    admin_password: str = ""
    page_size: int = Field(default=10, gt=0)
    search_debounce_seconds: float = Field(default=0.5, ge=0)
    request_timeout: Optional[float] = None  # None: transport default
    session_file: str = str(DATA_DIR / "session.json")

    @field_validator("base_url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        return normalize_base_url(value)


class LoggingSettings(BaseModel):
    """Logging settings."""
    level: str = "INFO"


class Settings(BaseModel):
    """Top-level application settings."""
    cms: CMSSettings = Field(default_factory=CMSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """Load settings from YAML (if present) and apply env overrides."""
        settings_path = path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

        cms = dict(data.get("cms") or {})
        cms.update(_cms_env_overrides())
        data["cms"] = cms

        if level := os.getenv("LOG_LEVEL"):
            data["logging"] = {**(data.get("logging") or {}), "level": level}

        return cls(**data)


def _cms_env_overrides() -> dict:
    """Collect CMS settings from the environment, skipping unset values."""
    overrides: dict = {}
    base_url = os.getenv("STRAPI_BASE_URL") or os.getenv("NEXT_PUBLIC_STRAPI_BASE_URL")
    if base_url:
        overrides["base_url"] = base_url
    api_token = os.getenv("STRAPI_API_TOKEN") or os.getenv("NEXT_PUBLIC_STRAPI_API_TOKEN")
    if api_token:
        overrides["api_token"] = api_token
    if email := os.getenv("ADMIN_EMAIL"):
        overrides["admin_email"] = email
    if password := os.getenv("ADMIN_PASSWORD"):
        overrides["admin_password"] = password
    if timeout := os.getenv("REQUEST_TIMEOUT"):
        overrides["request_timeout"] = float(timeout)
    if session_file := os.getenv("POSTS_MANAGER_SESSION_FILE"):
        overrides["session_file"] = session_file
    return overrides
