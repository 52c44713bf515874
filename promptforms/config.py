"""Process configuration read from environment variables.

Settings are resolved once into a Settings instance. Components that need
configuration (the provider dispatcher, the API app) receive it explicitly
instead of reading os.environ themselves.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime configuration for the service."""

    # postgres://... selects PostgreSQL, anything else uses SQLite
    database_url: str = ""
    sqlite_path: str = "forms.db"

    # Process-wide fallback credential, used by the gemini provider only
    gemini_api_key: Optional[str] = None

    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    port: int = 3000

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current process environment."""
        return cls(
            database_url=os.environ.get("PROMPTFORMS_DATABASE_URL", ""),
            sqlite_path=os.environ.get("PROMPTFORMS_SQLITE_PATH", "forms.db"),
            gemini_api_key=os.environ.get("GEMINI_API_KEY") or None,
            cors_origins=_split_csv(os.environ.get("PROMPTFORMS_CORS_ORIGINS", "*")),
            log_level=os.environ.get("PROMPTFORMS_LOG_LEVEL", "INFO").upper(),
            port=int(os.environ.get("PORT", "3000")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings (read from the environment on first use)."""
    return Settings.from_env()
