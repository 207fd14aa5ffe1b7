"""Manually provided clip titles that take priority over generated ones.

Overrides are keyed by video id and the clip's position within that video.
The manager is created once per process, loaded explicitly, and handed to
whatever needs it.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from lib.store import ClipStore, StoreError

logger = logging.getLogger(__name__)


class TitleOverrideManager:
    def __init__(self, store: ClipStore):
        self.store = store
        self.overrides: Dict[str, Dict[int, str]] = {}
        self.loaded = False

    def load(self):
        """Load overrides from storage.

        A failed load is logged and leaves the manager empty but loaded, so
        callers do not hit storage again on every request.
        """
        try:
            stored = self.store.load_title_overrides()
        except StoreError as e:
            logger.error("Failed to load title overrides: %s", e)
            stored = {}
        for video_id, titles in stored.items():
            self.overrides[video_id] = {int(index): title for index, title in titles.items()}
        self.loaded = True
        logger.info("Loaded title overrides for %d videos", len(self.overrides))

    def ensure_loaded(self):
        if not self.loaded:
            self.load()

    def save(self):
        payload = {
            video_id: {str(index): title for index, title in titles.items()}
            for video_id, titles in self.overrides.items()
        }
        self.store.save_title_overrides(payload, datetime.now(timezone.utc).isoformat())
        logger.info("Saved title overrides for %d videos", len(payload))

    def add_title_override(self, video_id: str, clip_index: int, title: str):
        self.overrides.setdefault(video_id, {})[clip_index] = title
        logger.debug("Added title override for %s[%d]: %r", video_id, clip_index, title)

    def add_video_titles(self, video_id: str, titles: List[str]):
        """Set titles for a video's clips in order; blank entries are skipped."""
        for index, title in enumerate(titles):
            if title and title.strip():
                self.add_title_override(video_id, index, title.strip())

    def set_video_titles(self, video_id: str, titles: List[str]):
        """Replace every override for a video with the given ordered titles."""
        self.overrides.pop(video_id, None)
        self.add_video_titles(video_id, titles)

    def get_title_override(self, video_id: str, clip_index: int) -> Optional[str]:
        return self.overrides.get(video_id, {}).get(clip_index)

    def has_overrides_for_video(self, video_id: str) -> bool:
        return bool(self.overrides.get(video_id))

    def resolve_title(self, video_id: str, clip_index: int, fallback: str) -> tuple:
        """Pick a clip title, preferring a manual override over ``fallback``.

        Returns ``(title, source)`` where source is "manual" or "generated".
        """
        manual = self.get_title_override(video_id, clip_index)
        if manual:
            return manual, "manual"
        return fallback, "generated"

    def clear(self):
        self.overrides.clear()

    def summary(self) -> dict:
        return {
            "totalVideos": len(self.overrides),
            "totalTitles": sum(len(t) for t in self.overrides.values()),
            "videoDetails": {
                video_id: {"titleCount": len(titles), "titles": {str(i): t for i, t in titles.items()}}
                for video_id, titles in self.overrides.items()
            },
        }
