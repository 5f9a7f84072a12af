"""Environment-driven settings."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = field(
        default_factory=lambda: os.getenv("DATABASE_URL", "sqlite:///./canonhealth.db")
    )
    uploads_dir: Path = field(
        default_factory=lambda: Path(os.getenv("CANON_UPLOADS_DIR", "./uploads"))
    )
    log_level: str = field(default_factory=lambda: os.getenv("CANON_LOG_LEVEL", "INFO").upper())
    default_duration_hours: int = field(
        default_factory=lambda: int(os.getenv("CANON_DEFAULT_DURATION_HOURS", "48"))
    )
    cors_origins: List[str] = field(
        default_factory=lambda: _split_csv(os.getenv("CANON_CORS_ORIGINS", "*"))
    )
    host: str = field(default_factory=lambda: os.getenv("CANON_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3000")))


settings = Settings()
