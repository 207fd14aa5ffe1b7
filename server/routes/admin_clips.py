"""Admin endpoints: manual clip creation, bulk import, timing review, title overrides."""

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from lib.clip_validator import ClipTiming, batch_validate_clips, validate_clip_timing
from lib.clips import extract_video_id
from lib.errors import classify_error
from lib.store import CATEGORIES, CLIPS, VIDEOS, ClipStore, StoreError
from lib.timecode import InvalidTimeFormat, format_time_for_display, parse_time_to_seconds
from lib.title_overrides import TitleOverrideManager
from server.deps import get_store, get_title_overrides, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])

MIN_CLIP_SECONDS = 5
MAX_CLIP_SECONDS = 1800
MAX_TITLE_LENGTH = 200
MAX_IMPORT_ROWS = 100
FALLBACK_TITLE_LENGTH = 50
UNTITLED = "Untitled Testimony"

TimeValue = Optional[Union[int, float, str]]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ManualClipRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    video_url: Optional[str] = Field(default=None, alias="videoUrl")
    video_id: Optional[str] = Field(default=None, alias="videoId")
    title: str = ""
    category_id: str = Field(default="", alias="categoryId")
    start_time: TimeValue = Field(default=None, alias="startTime")
    end_time: TimeValue = Field(default=None, alias="endTime")
    start: TimeValue = None
    end: TimeValue = None
    service_date: Optional[str] = Field(default=None, alias="serviceDate")
    episode: str = ""
    description: str = ""
    transcript: str = ""
    transcript_lang: str = Field(default="en", alias="transcriptLang")


class ImportRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    youtube_link: str = Field(default="", alias="youtubeLink")
    start_time: TimeValue = Field(default=None, alias="startTime")
    end_time: TimeValue = Field(default=None, alias="endTime")
    category: str = ""
    episode: str = ""
    clip_title: str = Field(default="", alias="clipTitle")
    brief_description: str = Field(default="", alias="briefDescription")
    language: str = ""
    service_date: Optional[str] = Field(default=None, alias="serviceDate")


class ImportRequest(BaseModel):
    clips: List[ImportRow] = Field(default_factory=list)


class VideoTitlesRequest(BaseModel):
    titles: List[str]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _store_failure(e: StoreError) -> HTTPException:
    classification = classify_error(e)
    logger.error("Store error: %s", e)
    return HTTPException(status_code=classification.status, detail=classification.message)


def _first_given(*values):
    for value in values:
        if value is not None and value != "":
            return value
    return None


def _category_slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def _video_doc(video_id: str, url: str, title: str, now: datetime) -> dict:
    return {
        "id": video_id,
        "title": title,
        "url": url or f"https://www.youtube.com/watch?v={video_id}",
        "thumbnailUrl": f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg",
        "createdAt": now,
        "uploadDate": now,
        "status": "live",
    }


def _timing_for(clip_id: str, data: dict) -> ClipTiming:
    return ClipTiming(
        id=clip_id,
        start_time_seconds=data["startTimeSeconds"],
        end_time_seconds=data["endTimeSeconds"],
        episode=data.get("episode", ""),
        title=data.get("title", ""),
    )


# ---------------------------------------------------------------------------
# Clips
# ---------------------------------------------------------------------------

@router.post("/clips/manual")
def create_manual_clip(
    req: ManualClipRequest,
    store: ClipStore = Depends(get_store),
    admin: str = Depends(require_admin),
) -> dict:
    """Create one clip from explicit start/end times."""
    video_id = (req.video_id or "").strip()
    if req.video_url and not video_id:
        try:
            video_id = extract_video_id(req.video_url)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    if not video_id:
        raise HTTPException(status_code=400, detail="videoId is required and cannot be empty")
    title = req.title.strip()
    if not title:
        raise HTTPException(status_code=400, detail="title is required and cannot be empty")
    category_id = req.category_id.strip()
    if not category_id:
        raise HTTPException(status_code=400, detail="categoryId is required and cannot be empty")
    if len(title) > MAX_TITLE_LENGTH:
        raise HTTPException(status_code=400, detail=f"title must be {MAX_TITLE_LENGTH} characters or less")

    try:
        start_sec = parse_time_to_seconds(_first_given(req.start_time, req.start))
    except InvalidTimeFormat as e:
        raise HTTPException(status_code=400, detail=f"Invalid start time: {e}")
    try:
        end_sec = parse_time_to_seconds(_first_given(req.end_time, req.end))
    except InvalidTimeFormat as e:
        raise HTTPException(status_code=400, detail=f"Invalid end time: {e}")

    if end_sec <= start_sec:
        raise HTTPException(status_code=400, detail="End time must be greater than start time")
    duration = end_sec - start_sec
    if duration > MAX_CLIP_SECONDS:
        raise HTTPException(status_code=400, detail="Clip duration cannot exceed 30 minutes")
    if duration < MIN_CLIP_SECONDS:
        raise HTTPException(status_code=400, detail=f"Clip duration must be at least {MIN_CLIP_SECONDS} seconds")

    now = datetime.now(timezone.utc)
    try:
        if store.get_document(CATEGORIES, category_id) is None:
            raise HTTPException(status_code=400, detail="Category not found")

        writes = []
        if store.get_document(VIDEOS, video_id) is None:
            writes.append((VIDEOS, video_id, _video_doc(video_id, req.video_url, f"Video {video_id}", now)))

        clip_id = store.new_id(CLIPS)
        clip_data = {
            "id": clip_id,
            "sourceVideoId": video_id,
            "title": title,
            "categoryId": category_id,
            "startTimeSeconds": start_sec,
            "endTimeSeconds": end_sec,
            "duration": duration,
            "episode": req.episode.strip(),
            "serviceDate": (req.service_date or "").strip(),
            "fullText": req.description or req.transcript.strip(),
            "language": req.transcript_lang.strip() or "English",
            "processedClipUrl": "",
            "status": "live",
            "savedCount": 0,
            "createdAt": now,
            "createdBy": admin,
            "source": "manual",
        }
        writes.append((CLIPS, clip_id, clip_data))
        store.commit(writes)
    except StoreError as e:
        raise _store_failure(e)

    review = validate_clip_timing(_timing_for(clip_id, clip_data))
    logger.info("Created manual clip %s (%s-%s)", clip_id,
                format_time_for_display(start_sec), format_time_for_display(end_sec))
    return {
        "success": True,
        "id": clip_id,
        "clip": {
            "id": clip_id,
            "title": title,
            "duration": duration,
            "startTimeSeconds": start_sec,
            "endTimeSeconds": end_sec,
            "processedClipUrl": "",
        },
        "timingReview": review.to_dict(),
    }


@router.post("/clips/import")
def import_clips(
    req: ImportRequest,
    store: ClipStore = Depends(get_store),
    overrides: TitleOverrideManager = Depends(get_title_overrides),
) -> dict:
    """Bulk import clips from spreadsheet rows.

    Rows that fail to parse are reported and skipped. Timing problems do not
    block a row; they mark the clip for review.
    """
    rows = req.clips
    if not rows:
        raise HTTPException(status_code=400, detail="No clips provided")
    if len(rows) > MAX_IMPORT_ROWS:
        raise HTTPException(
            status_code=400,
            detail=f"Too many clips. Maximum {MAX_IMPORT_ROWS} clips per import. You provided {len(rows)}.",
        )

    logger.info("Importing %d clips", len(rows))
    now = datetime.now(timezone.utc)
    writes = []
    saved = []
    errors = []
    flagged = []
    known_videos = set()
    video_positions = {}

    try:
        categories = store.list_categories()
        by_name = {(c.get("name") or "").lower(): c["id"] for c in categories if c.get("name")}
        known_categories = {c["id"] for c in categories}

        for row_number, row in enumerate(rows, start=1):
            try:
                video_id = extract_video_id(row.youtube_link)
                start_sec = parse_time_to_seconds(row.start_time)
                end_sec = parse_time_to_seconds(row.end_time)
            except ValueError as e:
                errors.append({"row": row_number, "episode": row.episode, "error": str(e)})
                continue

            category_name = row.category.strip()
            category_id = by_name.get(category_name.lower()) or _category_slug(category_name)
            if not category_id:
                errors.append({"row": row_number, "episode": row.episode,
                               "error": f"Category not found: {row.category}"})
                continue
            if category_id not in known_categories:
                writes.append((CATEGORIES, category_id, {"name": category_name}))
                known_categories.add(category_id)
                by_name[category_name.lower()] = category_id

            if video_id not in known_videos:
                known_videos.add(video_id)
                if store.get_document(VIDEOS, video_id) is None:
                    writes.append((VIDEOS, video_id, _video_doc(
                        video_id, row.youtube_link, f"Episode {row.episode}".strip(), now)))

            position = video_positions.get(video_id, 0)
            video_positions[video_id] = position + 1
            if row.clip_title.strip():
                title, title_source = row.clip_title.strip(), "provided"
            else:
                fallback = row.brief_description.strip()[:FALLBACK_TITLE_LENGTH] or UNTITLED
                title, title_source = overrides.resolve_title(video_id, position, fallback)

            clip_id = store.new_id(CLIPS)
            clip_data = {
                "id": clip_id,
                "sourceVideoId": video_id,
                "categoryId": category_id,
                "title": title,
                "titleSource": title_source,
                "startTimeSeconds": start_sec,
                "endTimeSeconds": end_sec,
                "duration": end_sec - start_sec,
                "fullText": row.brief_description,
                "language": row.language,
                "episode": row.episode,
                "serviceDate": (row.service_date or "").strip(),
                "processedClipUrl": "",
                "savedCount": 0,
                "createdAt": now,
                "createdBy": "csv-import",
                "source": "import",
            }

            review = validate_clip_timing(_timing_for(clip_id, clip_data))
            clip_data["status"] = "live" if review.is_valid else "reviewing"
            if not review.is_valid:
                clip_data["timingIssues"] = review.issues
                clip_data["timingSeverity"] = review.severity
                flagged.append({"row": row_number, "id": clip_id, "episode": row.episode,
                                "validation": review.to_dict()})

            writes.append((CLIPS, clip_id, clip_data))
            saved.append(clip_id)

        if writes:
            store.commit(writes)
    except StoreError as e:
        raise _store_failure(e)

    logger.info("Import finished: %d saved, %d errors, %d flagged", len(saved), len(errors), len(flagged))
    return {
        "success": True,
        "imported": len(saved),
        "errors": len(errors),
        "flagged": len(flagged),
        "details": {
            "savedClips": len(saved),
            "total": len(rows),
            "errors": errors[:5],
            "errorSample": errors[0] if errors else None,
            "flaggedClips": flagged[:5],
        },
    }


@router.get("/clips/timing-report")
def timing_report(
    limit: int = Query(1000, ge=1, le=5000),
    store: ClipStore = Depends(get_store),
) -> dict:
    """Run the timing validator across stored clips."""
    try:
        clips = store.all_clips(limit)
    except StoreError as e:
        raise _store_failure(e)

    report = batch_validate_clips(clips)
    return {
        "summary": report.summary(),
        "flaggedClips": [
            {
                "id": item.clip.id,
                "episode": item.clip.episode,
                "title": item.clip.title_short,
                "startTimeSeconds": item.clip.start_sec,
                "endTimeSeconds": item.clip.end_sec,
                "validation": item.validation.to_dict(),
            }
            for item in report.flagged_clips
        ],
    }


@router.get("/stats")
def stats(store: ClipStore = Depends(get_store)) -> dict:
    try:
        return {
            "totalClips": store.count(CLIPS),
            "totalCategories": store.count(CATEGORIES),
        }
    except StoreError as e:
        raise _store_failure(e)


# ---------------------------------------------------------------------------
# Title overrides
# ---------------------------------------------------------------------------

@router.get("/title-overrides")
def list_title_overrides(overrides: TitleOverrideManager = Depends(get_title_overrides)) -> dict:
    return overrides.summary()


@router.put("/title-overrides/{video_id}")
def set_title_overrides(
    video_id: str,
    req: VideoTitlesRequest,
    overrides: TitleOverrideManager = Depends(get_title_overrides),
) -> dict:
    """Replace the manual titles for a video's clips, in clip order."""
    overrides.set_video_titles(video_id, req.titles)
    try:
        overrides.save()
    except StoreError as e:
        raise _store_failure(e)
    logger.info("Set %d manual titles for video %s", len(req.titles), video_id)
    return {
        "videoId": video_id,
        "titles": {str(i): t for i, t in overrides.overrides.get(video_id, {}).items()},
    }
