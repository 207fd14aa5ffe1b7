"""Clip listing: fetch, filter, order and paginate one page of clips."""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from lib.clips import ClipRecord, dedupe_by_id, episode_number, to_summary
from lib.cursor import cursor_for_sort, encode_cursor
from lib.query import ClipQuery
from lib.store import ClipStore

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_FETCH_CAP = 1000


@dataclass
class ClipPage:
    items: List[dict] = field(default_factory=list)
    next_cursor: Optional[str] = None
    meta: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        body = {"items": self.items, "meta": self.meta}
        if self.next_cursor:
            body["nextCursor"] = self.next_cursor
        return body


def matches_month(record: ClipRecord, month_range) -> bool:
    if not record.service_date:
        return False
    start, end = month_range
    return start <= record.service_date <= end


def matches_episode(record: ClipRecord, episode: str) -> bool:
    """Numeric comparison of digit runs, so "7" matches "EP007"."""
    wanted = episode_number(episode)
    return wanted is not None and record.episode_number == wanted


class ClipListQuery:
    """Runs a normalized ClipQuery against a store.

    Category pages are delivered whole (up to ``category_fetch_cap`` clips)
    with no cursor. Other pages fetch ``limit`` rows in sort order after the
    cursor position, and emit a cursor from the last row storage returned.
    """

    def __init__(self, store: ClipStore, category_fetch_cap: int = DEFAULT_CATEGORY_FETCH_CAP):
        self.store = store
        self.category_fetch_cap = category_fetch_cap

    def run(self, query: ClipQuery) -> ClipPage:
        started = time.monotonic()
        category_mode = bool(query.category_id)
        fetch_limit = self.category_fetch_cap if category_mode else query.limit

        rows = self.store.fetch_clips(
            query.category_id,
            query.sort,
            fetch_limit,
            after=None if category_mode else query.cursor,
        )
        query_time_ms = int((time.monotonic() - started) * 1000)

        records = dedupe_by_id(rows)
        month_range = query.month_range
        if month_range:
            records = [r for r in records if matches_month(r, month_range)]
        if query.episode:
            records = [r for r in records if matches_episode(r, query.episode)]

        # Latest episode first; unnumbered episodes sort as 0.
        records.sort(key=lambda r: r.episode_number or 0, reverse=True)

        next_cursor = None
        if not category_mode:
            records = records[: query.limit]
            if len(records) == query.limit and rows:
                last = rows[-1]
                next_cursor = encode_cursor(cursor_for_sort(
                    query.sort,
                    service_date=last.service_date,
                    saved_count=last.saved_count,
                    created_at_ms=last.created_at_ms,
                ))

        items = [to_summary(r) for r in records]
        meta = {
            "count": len(items),
            "hasMore": next_cursor is not None,
            "queryTimeMs": query_time_ms,
            "query": query.echo(),
        }
        logger.info(
            "Listed %d clips (sort=%s, category=%s, next=%s, %dms)",
            len(items), query.sort, query.category_id, next_cursor is not None, query_time_ms,
        )
        return ClipPage(items=items, next_cursor=next_cursor, meta=meta)
