"""Environment-based configuration for the API service."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


class Settings:
    """API configuration loaded from environment variables."""

    def __init__(self):
        self.api_secret = os.getenv("LP_API_SECRET", "")
        if not self.api_secret:
            raise RuntimeError(
                "LP_API_SECRET environment variable is required. "
                "Generate one with: openssl rand -hex 32"
            )
        self.host = os.getenv("LP_API_HOST", "0.0.0.0")
        self.port = int(os.getenv("LP_API_PORT", "8000"))
        self.db_path = os.getenv(
            "LP_DATABASE_PATH",
            str(Path.home() / ".leadpage-engine" / "pages.db"),
        )
        self.atomic_counters = (
            os.getenv("LP_ATOMIC_COUNTERS", "false").lower() == "true"
        )
        self.public_base_url = os.getenv("LP_PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/")
        self.debug = os.getenv("LP_ENGINE_ENV", "production") != "production"

        # CORS
        origins = os.getenv("LP_ALLOWED_ORIGINS", "")
        self.allowed_origins = (
            [o.strip() for o in origins.split(",") if o.strip()] if origins else list(DEFAULT_ORIGINS)
        )


_settings = None


def _get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Drop cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None


class _SettingsProxy:
    """Lazy proxy so settings aren't loaded until first access."""

    def __getattr__(self, name):
        return getattr(_get_settings(), name)


settings = _SettingsProxy()
