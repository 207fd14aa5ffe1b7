"""Environment-driven settings for the testimony library."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:3001"


def get_project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@dataclass
class Settings:
    store_backend: str = "firestore"
    gcp_project: str = ""
    firestore_database: str = "(default)"
    admin_api_token: str = ""
    cors_origins: List[str] = field(default_factory=list)
    category_fetch_cap: int = 1000
    log_level: str = "INFO"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def get_settings() -> Settings:
    """Read settings from the environment.

    Environment variables:
        TESTIMONY_STORE: "firestore" (default) or "memory"
        GOOGLE_CLOUD_PROJECT: Firestore project id
        FIRESTORE_DATABASE: Firestore database id (default "(default)")
        ADMIN_API_TOKEN: bearer token for admin routes; empty disables them
        CORS_ORIGINS: comma separated allowed origins
        CATEGORY_FETCH_CAP: max clips fetched for a category page (default 1000)
        LOG_LEVEL: logging level name (default INFO)
    """
    origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return Settings(
        store_backend=os.getenv("TESTIMONY_STORE", "firestore").strip().lower() or "firestore",
        gcp_project=os.getenv("GOOGLE_CLOUD_PROJECT", "").strip(),
        firestore_database=os.getenv("FIRESTORE_DATABASE", "").strip() or "(default)",
        admin_api_token=os.getenv("ADMIN_API_TOKEN", "").strip(),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        category_fetch_cap=_int_env("CATEGORY_FETCH_CAP", 1000),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
