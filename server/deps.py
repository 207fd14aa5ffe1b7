"""Shared FastAPI dependencies: settings, store, title overrides, admin auth."""

import hmac
import logging
import threading
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from lib.settings import Settings, get_settings
from lib.store import ClipStore, build_store
from lib.title_overrides import TitleOverrideManager

logger = logging.getLogger(__name__)

_init_lock = threading.Lock()


def get_app_settings() -> Settings:
    return get_settings()


def get_store(request: Request, settings: Settings = Depends(get_app_settings)) -> ClipStore:
    """Process-wide store, created on first use and kept on app.state."""
    state = request.app.state
    if getattr(state, "store", None) is None:
        with _init_lock:
            if getattr(state, "store", None) is None:
                state.store = build_store(settings)
    return state.store


def get_title_overrides(request: Request, store: ClipStore = Depends(get_store)) -> TitleOverrideManager:
    state = request.app.state
    if getattr(state, "title_overrides", None) is None:
        with _init_lock:
            if getattr(state, "title_overrides", None) is None:
                state.title_overrides = TitleOverrideManager(store)
    manager = state.title_overrides
    manager.ensure_loaded()
    return manager


def require_admin(
    authorization: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Check the shared admin bearer token. Returns the principal name."""
    if not settings.admin_api_token:
        raise HTTPException(status_code=503, detail="Admin API is not configured")
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip(), settings.admin_api_token):
        logger.warning("Rejected admin request with missing or invalid token")
        raise HTTPException(status_code=401, detail="Unauthorized access")
    return "admin"
