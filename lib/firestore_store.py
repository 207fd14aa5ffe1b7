"""Firestore-backed ClipStore."""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone

from google.api_core import exceptions as gexc
from google.cloud import firestore

from lib.clips import clip_from_document
from lib.cursor import MostSavedCursor
from lib.store import CLIPS, CATEGORIES, ClipStore, StoreError, StoreErrorKind, sort_field

logger = logging.getLogger(__name__)

# Checked in order; the first matching exception type wins.
_ERROR_KINDS = (
    (gexc.NotFound, StoreErrorKind.NOT_FOUND),
    (gexc.PermissionDenied, StoreErrorKind.PERMISSION_DENIED),
    (gexc.Forbidden, StoreErrorKind.PERMISSION_DENIED),
    (gexc.ResourceExhausted, StoreErrorKind.RESOURCE_EXHAUSTED),
    (gexc.TooManyRequests, StoreErrorKind.RESOURCE_EXHAUSTED),
    (gexc.ServiceUnavailable, StoreErrorKind.UNAVAILABLE),
    (gexc.DeadlineExceeded, StoreErrorKind.UNAVAILABLE),
)


def translate_error(exc: Exception) -> StoreError:
    """Map a google-api-core exception onto a StoreError kind.

    Firestore reports a missing composite index as FailedPrecondition with
    "requires an index" in the message.
    """
    message = str(exc)
    if isinstance(exc, gexc.FailedPrecondition) and "index" in message.lower():
        return StoreError(StoreErrorKind.MISSING_INDEX, message)
    for exc_type, kind in _ERROR_KINDS:
        if isinstance(exc, exc_type):
            return StoreError(kind, message)
    return StoreError(StoreErrorKind.UNKNOWN, message)


@contextmanager
def _translated():
    try:
        yield
    except gexc.GoogleAPIError as exc:
        raise translate_error(exc) from exc


def _ms_to_datetime(ms) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


class FirestoreStore(ClipStore):
    def __init__(self, client: firestore.Client):
        self._db = client

    @classmethod
    def from_settings(cls, settings) -> "FirestoreStore":
        client = firestore.Client(
            project=settings.gcp_project or None,
            database=settings.firestore_database,
        )
        return cls(client)

    def fetch_clips(self, category_id, sort, limit, after=None):
        query = self._db.collection(CLIPS)
        if category_id:
            query = query.where(filter=firestore.FieldFilter("categoryId", "==", category_id))
        else:
            field = sort_field(sort)
            query = query.order_by(field, direction=firestore.Query.DESCENDING)
            query = query.order_by("createdAt", direction=firestore.Query.DESCENDING)
            if after is not None:
                primary = after.saved_count if isinstance(after, MostSavedCursor) else after.service_date
                query = query.start_after({field: primary, "createdAt": _ms_to_datetime(after.created_at_ms)})
        query = query.limit(limit)

        with _translated():
            snapshots = list(query.stream())
        return [clip_from_document(snap.id, snap.to_dict() or {}) for snap in snapshots]

    def all_clips(self, limit):
        with _translated():
            snapshots = list(self._db.collection(CLIPS).limit(limit).stream())
        return [clip_from_document(snap.id, snap.to_dict() or {}) for snap in snapshots]

    def list_categories(self):
        with _translated():
            snapshots = list(self._db.collection(CATEGORIES).stream())
        return [{"id": snap.id, **(snap.to_dict() or {})} for snap in snapshots]

    def get_document(self, collection, doc_id):
        with _translated():
            snap = self._db.collection(collection).document(doc_id).get()
        return snap.to_dict() if snap.exists else None

    def new_id(self, collection):
        return self._db.collection(collection).document().id

    def commit(self, writes):
        batch = self._db.batch()
        for collection, doc_id, data in writes:
            batch.set(self._db.collection(collection).document(doc_id), data)
        with _translated():
            batch.commit()
        logger.debug("Committed %d writes", len(writes))

    def count(self, collection):
        with _translated():
            result = self._db.collection(collection).count().get()
        return int(result[0][0].value)
