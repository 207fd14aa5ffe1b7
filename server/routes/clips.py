"""Public clip listing endpoint."""

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from lib.errors import classify_error, error_body
from lib.listing import ClipListQuery
from lib.query import normalize_query
from lib.settings import Settings
from lib.store import ClipStore
from server.deps import get_app_settings, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clips", tags=["clips"])

CACHE_CONTROL = "public, max-age=60, stale-while-revalidate=300, s-maxage=120"
QUERY_PARAMS = ("categoryId", "month", "year", "episode", "sort", "limit", "cursor")


def _etag(query, count: int, query_time_ms: int) -> str:
    return '"clips-{}-{}-{}-{}-{}-{}"'.format(
        query.sort,
        query.category_id or "all",
        query.month or "all",
        query.episode or "all",
        count,
        query_time_ms,
    )


@router.get("")
@router.get("/")
def list_clips(
    request: Request,
    store: ClipStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    """List clips with filters and cursor pagination.

    Query parameters: categoryId, month (YYYY-MM or bare MM with year),
    year, episode, sort (recent|mostSaved), limit (1-50), cursor.
    """
    started = time.monotonic()
    params = {name: request.query_params.get(name) for name in QUERY_PARAMS}
    user_agent = (request.headers.get("user-agent") or "")[:100]

    try:
        query = normalize_query(params)
        logger.info("GET /api/clips %s ua=%s", query.echo(), user_agent)
        page = ClipListQuery(store, category_fetch_cap=settings.category_fetch_cap).run(query)
    except Exception as e:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        classification = classify_error(e)
        log = logger.warning if classification.status < 500 else logger.error
        log(
            "GET /api/clips failed (%d) after %dms: %s params=%s ua=%s",
            classification.status, elapsed_ms, e, params, user_agent,
        )
        return JSONResponse(
            error_body(classification.message),
            status_code=classification.status,
            headers={"Cache-Control": "no-store"},
        )

    return JSONResponse(
        page.to_dict(),
        headers={
            "Cache-Control": CACHE_CONTROL,
            "ETag": _etag(query, page.meta["count"], page.meta["queryTimeMs"]),
            "Vary": "Accept-Encoding",
        },
    )
