"""Document storage adapter.

``ClipStore`` is the boundary between the app and the document database.
Implementations return canonical ``ClipRecord`` objects and raise
``StoreError`` tagged with a ``StoreErrorKind`` instead of leaking the
client library's exception types.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from lib.clips import ClipRecord, clip_from_document
from lib.cursor import SORT_MOST_SAVED, Cursor, MostSavedCursor, RecentCursor

logger = logging.getLogger(__name__)

CATEGORIES = "categories"
CLIPS = "clips"
VIDEOS = "videos"
TITLE_OVERRIDES = "titleOverrides"
TITLE_OVERRIDES_DOC = "manual"

# (collection, document id, data)
Write = Tuple[str, str, dict]


class StoreErrorKind(Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    MISSING_INDEX = "missing_index"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class StoreError(Exception):
    """A storage failure, classified by kind."""

    def __init__(self, kind: StoreErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


def sort_field(sort: str) -> str:
    """Stored field that orders a listing for the given sort mode."""
    return "savedCount" if sort == SORT_MOST_SAVED else "serviceDate"


class ClipStore(ABC):
    """Read/write operations the app needs from the document database."""

    @abstractmethod
    def fetch_clips(
        self,
        category_id: Optional[str],
        sort: str,
        limit: int,
        after: Optional[Cursor] = None,
    ) -> List[ClipRecord]:
        """Fetch up to ``limit`` clips.

        With a category, returns that category's clips in storage order and
        ignores ``after``. Without one, orders by the sort field then
        ``createdAt`` (both descending), skipping everything up to and
        including the ``after`` position. Clips lacking the sort field are
        not returned in that mode.
        """

    @abstractmethod
    def all_clips(self, limit: int) -> List[ClipRecord]:
        ...

    @abstractmethod
    def list_categories(self) -> List[dict]:
        ...

    @abstractmethod
    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    def new_id(self, collection: str) -> str:
        ...

    @abstractmethod
    def commit(self, writes: Sequence[Write]):
        """Apply a group of document writes as one batch."""

    @abstractmethod
    def count(self, collection: str) -> int:
        ...

    def load_title_overrides(self) -> Dict[str, Dict[str, str]]:
        doc = self.get_document(TITLE_OVERRIDES, TITLE_OVERRIDES_DOC) or {}
        return doc.get("overrides") or {}

    def save_title_overrides(self, overrides: Dict[str, Dict[str, str]], updated_at: str):
        self.commit([
            (TITLE_OVERRIDES, TITLE_OVERRIDES_DOC, {"overrides": overrides, "lastUpdated": updated_at}),
        ])


def _cursor_key(cursor: Cursor) -> tuple:
    if isinstance(cursor, MostSavedCursor):
        return (cursor.saved_count, cursor.created_at_ms)
    if isinstance(cursor, RecentCursor):
        return (cursor.service_date, cursor.created_at_ms)
    raise TypeError(f"Unsupported cursor: {cursor!r}")


class MemoryStore(ClipStore):
    """In-process store with the same ordering rules as the Firestore one.

    Used for tests and for running the API locally without credentials.
    """

    def __init__(self, collections: Optional[Dict[str, Dict[str, dict]]] = None):
        self._collections: Dict[str, Dict[str, dict]] = {}
        for name, docs in (collections or {}).items():
            self._collections[name] = {doc_id: dict(data) for doc_id, data in docs.items()}

    def _docs(self, collection: str) -> Dict[str, dict]:
        return self._collections.setdefault(collection, {})

    def add(self, collection: str, doc_id: str, data: dict):
        self._docs(collection)[doc_id] = dict(data)

    def fetch_clips(self, category_id, sort, limit, after=None):
        docs = self._docs(CLIPS)
        if category_id:
            rows = [(doc_id, data) for doc_id, data in docs.items() if data.get("categoryId") == category_id]
            return [clip_from_document(doc_id, data) for doc_id, data in rows[:limit]]

        field = sort_field(sort)
        records = [clip_from_document(doc_id, data) for doc_id, data in docs.items() if field in data]

        def key(record: ClipRecord) -> tuple:
            primary = record.saved_count if sort == SORT_MOST_SAVED else record.service_date
            return (primary, record.created_at_ms)

        records.sort(key=key, reverse=True)
        if after is not None:
            boundary = _cursor_key(after)
            records = [r for r in records if key(r) < boundary]
        return records[:limit]

    def all_clips(self, limit):
        docs = list(self._docs(CLIPS).items())[:limit]
        return [clip_from_document(doc_id, data) for doc_id, data in docs]

    def list_categories(self):
        return [{"id": doc_id, **data} for doc_id, data in self._docs(CATEGORIES).items()]

    def get_document(self, collection, doc_id):
        data = self._docs(collection).get(doc_id)
        return dict(data) if data is not None else None

    def new_id(self, collection):
        return uuid.uuid4().hex[:20]

    def commit(self, writes):
        for collection, doc_id, data in writes:
            self._docs(collection)[doc_id] = dict(data)

    def count(self, collection):
        return len(self._docs(collection))


def build_store(settings) -> ClipStore:
    """Create the store selected by settings."""
    if settings.store_backend == "memory":
        logger.info("Using in-memory clip store")
        return MemoryStore()
    from lib.firestore_store import FirestoreStore

    logger.info("Using Firestore clip store (project=%s)", settings.gcp_project or "<default>")
    return FirestoreStore.from_settings(settings)
