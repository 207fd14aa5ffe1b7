"""Opaque pagination cursors for the clip listing.

A cursor is a base64url (unpadded) JSON object in one of two closed shapes:

    recent:     {"serviceDate": "2025-02-09", "createdAtMs": 1739100000000}
    mostSaved:  {"savedCount": 12, "createdAtMs": 1739100000000}

Decoding never raises. Anything that is not exactly one of those shapes
decodes to None and the listing starts from the beginning.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Union

logger = logging.getLogger(__name__)

SORT_RECENT = "recent"
SORT_MOST_SAVED = "mostSaved"

_RECENT_KEYS = frozenset({"serviceDate", "createdAtMs"})
_MOST_SAVED_KEYS = frozenset({"savedCount", "createdAtMs"})

# Real cursors are well under 100 chars.
MAX_TOKEN_LENGTH = 512


class CursorEncodingError(ValueError):
    """Raised when a cursor payload cannot be serialized."""


@dataclass(frozen=True)
class RecentCursor:
    service_date: str
    created_at_ms: Union[int, float]

    sort = SORT_RECENT

    def to_payload(self) -> dict:
        return {"serviceDate": self.service_date, "createdAtMs": self.created_at_ms}


@dataclass(frozen=True)
class MostSavedCursor:
    saved_count: Union[int, float]
    created_at_ms: Union[int, float]

    sort = SORT_MOST_SAVED

    def to_payload(self) -> dict:
        return {"savedCount": self.saved_count, "createdAtMs": self.created_at_ms}


Cursor = Union[RecentCursor, MostSavedCursor]


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def cursor_for_sort(sort: str, *, service_date: str, saved_count, created_at_ms) -> Cursor:
    """Build the cursor shape that belongs to a sort mode."""
    if sort == SORT_MOST_SAVED:
        return MostSavedCursor(saved_count=saved_count, created_at_ms=created_at_ms)
    return RecentCursor(service_date=service_date, created_at_ms=created_at_ms)


def encode_cursor(cursor: Union[Cursor, Mapping]) -> str:
    """Serialize a cursor (or a plain mapping) to a URL-safe token."""
    payload = cursor.to_payload() if hasattr(cursor, "to_payload") else cursor
    try:
        raw = json.dumps(payload, separators=(",", ":"), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise CursorEncodingError("Failed to encode pagination cursor") from exc
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _from_payload(payload) -> Optional[Cursor]:
    if not isinstance(payload, dict):
        return None
    keys = frozenset(payload)
    if keys == _RECENT_KEYS:
        if isinstance(payload["serviceDate"], str) and _is_number(payload["createdAtMs"]):
            return RecentCursor(payload["serviceDate"], payload["createdAtMs"])
        return None
    if keys == _MOST_SAVED_KEYS:
        if _is_number(payload["savedCount"]) and _is_number(payload["createdAtMs"]):
            return MostSavedCursor(payload["savedCount"], payload["createdAtMs"])
        return None
    return None


def decode_cursor(token: Optional[str], sort: Optional[str] = None) -> Optional[Cursor]:
    """Decode a cursor token, returning None for anything unusable.

    When ``sort`` is given, a cursor minted for the other sort mode is
    rejected too.
    """
    if not token:
        return None
    if len(token) > MAX_TOKEN_LENGTH:
        logger.warning("Cursor too long (%d chars)", len(token))
        return None
    padding = "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode((token + padding).encode("ascii"))
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError, UnicodeError, RecursionError):
        logger.warning("Invalid cursor format: %s", token[:64])
        return None

    cursor = _from_payload(payload)
    if cursor is None:
        logger.warning("Cursor has unexpected shape: %s", token[:64])
        return None
    if sort is not None and cursor.sort != sort:
        logger.info("Ignoring %s cursor for %s sort", cursor.sort, sort)
        return None
    return cursor
