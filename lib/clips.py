"""Clip record normalization.

Stored clip documents come from several generations of the app: manual
creation, CSV import and older processors each used their own field names.
``clip_from_document`` resolves those aliases once, at the storage boundary,
into a single ``ClipRecord``.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

# Ordered: the first present, truthy field wins.
VIDEO_ID_ALIASES = ("sourceVideoId", "videoId", "video_id")
START_ALIASES = ("startTimeSeconds", "startSec")
END_ALIASES = ("endTimeSeconds", "endSec")
TITLE_ALIASES = ("titleShort", "title")

THUMBNAIL_URL = "https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"

_DIGIT_RUN = re.compile(r"[0-9]+")
_VIDEO_ID_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/shorts/)([^&\n?#/]+)"),
    re.compile(r"youtube\.com/watch\?.*v=([^&\n?#]+)"),
)


@dataclass
class ClipRecord:
    id: str
    video_id: str = ""
    start_sec: int = 0
    end_sec: int = 0
    service_date: str = ""
    saved_count: int = 0
    title_short: str = ""
    summary_short: str = ""
    thumb_url: str = ""
    episode: str = ""
    category_id: str = ""
    status: str = ""
    processed_clip_url: str = ""
    created_at: Optional[datetime] = None

    @property
    def created_at_ms(self) -> int:
        """Creation time in epoch milliseconds; 0 when unknown."""
        if self.created_at is None:
            return 0
        return int(self.created_at.timestamp() * 1000)

    @property
    def episode_number(self) -> Optional[int]:
        return episode_number(self.episode)

    # ClipTiming-compatible view for the timing validator
    @property
    def start_time_seconds(self) -> int:
        return self.start_sec

    @property
    def end_time_seconds(self) -> int:
        return self.end_sec


def _first(data: dict, aliases, default=None):
    for key in aliases:
        value = data.get(key)
        if value:
            return value
    return default


def _as_int(value, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_timestamp(value) -> Optional[datetime]:
    """Coerce a stored createdAt value into an aware datetime.

    Firestore hands back datetimes; older writers stored ISO strings or epoch
    milliseconds.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable createdAt: %r", value)
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def video_thumbnail_url(video_id: str) -> str:
    return THUMBNAIL_URL.format(video_id=video_id) if video_id else ""


def clip_from_document(doc_id: str, data: dict) -> ClipRecord:
    """Build a ClipRecord from a raw stored document, resolving legacy names."""
    video_id = _first(data, VIDEO_ID_ALIASES, "")
    return ClipRecord(
        id=doc_id,
        video_id=video_id,
        start_sec=_as_int(_first(data, START_ALIASES, 0)),
        end_sec=_as_int(_first(data, END_ALIASES, 0)),
        service_date=data.get("serviceDate") or "",
        saved_count=_as_int(data.get("savedCount"), 0),
        title_short=_first(data, TITLE_ALIASES, ""),
        summary_short=data.get("summaryShort") or "",
        thumb_url=data.get("thumbUrl") or video_thumbnail_url(video_id),
        episode=str(data.get("episode") or ""),
        category_id=data.get("categoryId") or "",
        status=data.get("status") or "",
        processed_clip_url=data.get("processedClipUrl") or "",
        created_at=parse_timestamp(data.get("createdAt")),
    )


def episode_number(text: Optional[str]) -> Optional[int]:
    """Numeric value of the first digit run in an episode label ("EP007" -> 7)."""
    match = _DIGIT_RUN.search(text or "")
    return int(match.group(0)) if match else None


def to_summary(record: ClipRecord) -> dict:
    """Summary view of a clip as served by the listing endpoint."""
    return {
        "id": record.id,
        "videoId": record.video_id,
        "sourceVideoId": record.video_id,
        "startSec": record.start_sec,
        "endSec": record.end_sec,
        "serviceDate": record.service_date,
        "savedCount": record.saved_count,
        "titleShort": record.title_short,
        "summaryShort": record.summary_short,
        "thumbUrl": record.thumb_url,
        "episode": record.episode,
        "categoryId": record.category_id,
        "status": record.status,
        "processedClipUrl": record.processed_clip_url,
        "createdAt": record.created_at.isoformat() if record.created_at else None,
    }


def dedupe_by_id(records: Iterable[ClipRecord]) -> List[ClipRecord]:
    """Drop repeated ids, keeping the first occurrence in order."""
    seen = set()
    unique = []
    for record in records:
        if record.id in seen:
            logger.warning("Duplicate clip ID found: %s", record.id)
            continue
        seen.add(record.id)
        unique.append(record)
    return unique


def extract_video_id(url: str) -> str:
    """Pull the YouTube video id out of a watch, share, embed or shorts URL."""
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url or "")
        if match:
            return match.group(1)
    raise ValueError(f"Could not extract video ID from URL: {url}")
