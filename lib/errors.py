"""Mapping of listing failures onto HTTP statuses and the error envelope."""

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from lib.query import InvalidQueryParameter
from lib.store import StoreError, StoreErrorKind

GENERIC_MESSAGE = "Internal server error"
INDEX_MESSAGE = "Database index required. Please check Firestore indexes."
PERMISSION_MESSAGE = "Database permission denied"
RATE_LIMIT_MESSAGE = "Service temporarily unavailable due to rate limits"


@dataclass(frozen=True)
class ErrorClassification:
    status: int
    message: str


STORE_ERROR_TABLE = {
    StoreErrorKind.MISSING_INDEX: ErrorClassification(503, INDEX_MESSAGE),
    StoreErrorKind.UNAVAILABLE: ErrorClassification(503, "Database temporarily unavailable"),
    StoreErrorKind.PERMISSION_DENIED: ErrorClassification(403, PERMISSION_MESSAGE),
    StoreErrorKind.RESOURCE_EXHAUSTED: ErrorClassification(429, RATE_LIMIT_MESSAGE),
    StoreErrorKind.NOT_FOUND: ErrorClassification(404, "Requested resource not found"),
    StoreErrorKind.UNKNOWN: ErrorClassification(500, GENERIC_MESSAGE),
}

# Fallback for errors that never passed through a store adapter. Pinned to
# the Firestore client's wording; checked in order against the lowercased
# message.
MESSAGE_PATTERNS = (
    (re.compile(r"index"), ErrorClassification(503, INDEX_MESSAGE)),
    (re.compile(r"permission"), ErrorClassification(403, PERMISSION_MESSAGE)),
    (re.compile(r"quota|\brate\b"), ErrorClassification(429, RATE_LIMIT_MESSAGE)),
)


def classify_error(exc: Exception) -> ErrorClassification:
    """Pick the HTTP status and client message for a failed listing request."""
    if isinstance(exc, InvalidQueryParameter):
        return ErrorClassification(400, exc.message)
    if isinstance(exc, StoreError):
        return STORE_ERROR_TABLE[exc.kind]
    message = str(exc).lower()
    for pattern, classification in MESSAGE_PATTERNS:
        if pattern.search(message):
            return classification
    return ErrorClassification(500, GENERIC_MESSAGE)


def error_body(message: str) -> dict:
    """Client-facing error payload with a timestamp and correlation id."""
    return {
        "error": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "requestId": str(uuid.uuid4()),
    }
