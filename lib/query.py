"""Listing query validation and normalization."""

import calendar
import re
from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional, Tuple

from lib.cursor import SORT_MOST_SAVED, SORT_RECENT, Cursor, decode_cursor

DEFAULT_LIMIT = 20
MIN_LIMIT = 1
MAX_LIMIT = 50

MIN_YEAR = 2000
MAX_YEAR = 2100
MAX_CATEGORY_ID_LENGTH = 100
MAX_EPISODE_NUMBER = 10000

_MONTH_PATTERN = re.compile(r"^([0-9]{4})-([0-9]{2})$")
_BARE_MONTH_PATTERN = re.compile(r"^[0-9]{1,2}$")
_EPISODE_PATTERN = re.compile(r"^[0-9]+$")
_UNSAFE_CATEGORY_CHARS = re.compile(r"[<>\"']")


class InvalidQueryParameter(ValueError):
    """A listing parameter failed validation; the message is client-facing."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


@dataclass
class ClipQuery:
    category_id: Optional[str] = None
    month: Optional[str] = None
    episode: Optional[str] = None
    sort: str = SORT_RECENT
    limit: int = DEFAULT_LIMIT
    cursor: Optional[Cursor] = None

    @property
    def month_range(self) -> Optional[Tuple[str, str]]:
        return parse_month_range(self.month) if self.month else None

    def echo(self) -> dict:
        """Effective parameters, as reported back in response metadata."""
        return {
            "categoryId": self.category_id,
            "month": self.month,
            "episode": self.episode,
            "sort": self.sort,
            "limit": self.limit,
            "hasCursor": self.cursor is not None,
        }


def parse_month_range(month: str) -> Optional[Tuple[str, str]]:
    """Return the first and last ISO day of a YYYY-MM month, or None."""
    match = _MONTH_PATTERN.match(month or "")
    if not match:
        return None
    year, month_num = int(match.group(1)), int(match.group(2))
    if not (1 <= month_num <= 12) or not (MIN_YEAR <= year <= MAX_YEAR):
        return None
    last_day = calendar.monthrange(year, month_num)[1]
    return (
        date(year, month_num, 1).isoformat(),
        date(year, month_num, last_day).isoformat(),
    )


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_limit(value: Optional[str]) -> int:
    if value is None:
        return DEFAULT_LIMIT
    try:
        parsed = int(value)
    except ValueError:
        return DEFAULT_LIMIT
    return min(max(MIN_LIMIT, parsed), MAX_LIMIT)


def _combine_month(month: Optional[str], year: Optional[str], today: date) -> Optional[str]:
    if month is None:
        # A lone year is not a filter on its own.
        return None
    if not _BARE_MONTH_PATTERN.match(month):
        return month
    bare = month.zfill(2)
    return f"{year or today.year}-{bare}"


def normalize_query(params: Mapping[str, Optional[str]], today: Optional[date] = None) -> ClipQuery:
    """Validate raw listing parameters and shape them into a ClipQuery.

    Raises InvalidQueryParameter for a bad month, categoryId or episode.
    Unknown sorts, unparseable limits and unusable cursors fall back to
    defaults instead of failing.
    """
    today = today or date.today()

    sort = _clean(params.get("sort"))
    if sort not in (SORT_RECENT, SORT_MOST_SAVED):
        sort = SORT_RECENT

    limit = _parse_limit(_clean(params.get("limit")))

    month = _combine_month(_clean(params.get("month")), _clean(params.get("year")), today)
    if month is not None and parse_month_range(month) is None:
        raise InvalidQueryParameter("month", f"Invalid month format: {month}. Expected YYYY-MM format.")

    category_id = _clean(params.get("categoryId"))
    if category_id is not None and (
        len(category_id) > MAX_CATEGORY_ID_LENGTH or _UNSAFE_CATEGORY_CHARS.search(category_id)
    ):
        raise InvalidQueryParameter("categoryId", "Invalid categoryId format")

    episode = _clean(params.get("episode"))
    if episode is not None:
        if not _EPISODE_PATTERN.match(episode) or not (0 < int(episode) < MAX_EPISODE_NUMBER):
            raise InvalidQueryParameter("episode", "Invalid episode number format")

    cursor = decode_cursor(_clean(params.get("cursor")), sort=sort)

    return ClipQuery(
        category_id=category_id,
        month=month,
        episode=episode,
        sort=sort,
        limit=limit,
        cursor=cursor,
    )
