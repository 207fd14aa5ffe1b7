"""Category endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from lib.store import ClipStore, StoreError
from server.deps import get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("")
@router.get("/")
def list_categories(store: ClipStore = Depends(get_store)) -> dict:
    """List all categories."""
    logger.info("GET /api/categories")
    try:
        categories = store.list_categories()
    except StoreError as e:
        logger.error("Failed to fetch categories: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch categories")
    return {"categories": categories}
