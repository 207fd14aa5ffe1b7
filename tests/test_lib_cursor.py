"""Tests for lib.cursor module."""

import base64
import json
from unittest.mock import patch

import pytest

from lib.cursor import (
    CursorEncodingError,
    MostSavedCursor,
    RecentCursor,
    cursor_for_sort,
    decode_cursor,
    encode_cursor,
)


def _token(payload) -> str:
    raw = json.dumps(payload).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


class TestRoundTrip:
    def test_recent(self):
        cursor = RecentCursor(service_date="2025-02-09", created_at_ms=1739100000000)
        assert decode_cursor(encode_cursor(cursor)) == cursor

    def test_most_saved(self):
        cursor = MostSavedCursor(saved_count=12, created_at_ms=1739100000000)
        assert decode_cursor(encode_cursor(cursor)) == cursor

    def test_empty_service_date(self):
        cursor = RecentCursor(service_date="", created_at_ms=0)
        assert decode_cursor(encode_cursor(cursor)) == cursor

    def test_mapping_input(self):
        token = encode_cursor({"savedCount": 3, "createdAtMs": 5})
        assert decode_cursor(token) == MostSavedCursor(3, 5)

    def test_token_is_url_safe_and_unpadded(self):
        token = encode_cursor(RecentCursor("2025-02-09", 1739100000000))
        assert "=" not in token
        assert "+" not in token and "/" not in token

    def test_accepts_padded_token(self):
        raw = json.dumps({"serviceDate": "2025-01-01", "createdAtMs": 1}).encode()
        padded = base64.urlsafe_b64encode(raw).decode()
        assert decode_cursor(padded) == RecentCursor("2025-01-01", 1)


class TestDecodeRejects:
    @pytest.mark.parametrize("token", [None, ""])
    def test_absent(self, token):
        assert decode_cursor(token) is None

    @pytest.mark.parametrize("token", ["!!!", "not-base64-json", "é"])
    def test_garbage(self, token):
        assert decode_cursor(token) is None

    def test_deeply_nested_json(self):
        token = base64.urlsafe_b64encode(b"[" * 5000).decode("ascii")
        assert decode_cursor(token) is None

    def test_oversized_token(self):
        assert decode_cursor(_token({"serviceDate": "x" * 600, "createdAtMs": 1})) is None

    def test_recursion_in_parser(self):
        with patch("lib.cursor.json.loads", side_effect=RecursionError("too deep")):
            assert decode_cursor(_token({"savedCount": 1, "createdAtMs": 1})) is None

    def test_non_object_json(self):
        assert decode_cursor(_token([1, 2])) is None
        assert decode_cursor(_token("text")) is None

    def test_missing_field(self):
        assert decode_cursor(_token({"serviceDate": "2025-01-01"})) is None

    def test_extra_field(self):
        payload = {"serviceDate": "2025-01-01", "createdAtMs": 1, "savedCount": 2}
        assert decode_cursor(_token(payload)) is None

    def test_wrong_types(self):
        assert decode_cursor(_token({"serviceDate": 20250101, "createdAtMs": 1})) is None
        assert decode_cursor(_token({"savedCount": "3", "createdAtMs": 1})) is None
        assert decode_cursor(_token({"savedCount": 3, "createdAtMs": "1"})) is None

    def test_booleans_are_not_numbers(self):
        assert decode_cursor(_token({"savedCount": True, "createdAtMs": 1})) is None

    def test_other_sort_mode_rejected(self):
        token = encode_cursor(MostSavedCursor(4, 100))
        assert decode_cursor(token, sort="recent") is None
        assert decode_cursor(token, sort="mostSaved") == MostSavedCursor(4, 100)

    def test_recent_cursor_under_most_saved(self):
        token = encode_cursor(RecentCursor("2025-01-01", 100))
        assert decode_cursor(token, sort="mostSaved") is None


class TestEncode:
    def test_non_serializable(self):
        with pytest.raises(CursorEncodingError):
            encode_cursor({"serviceDate": object(), "createdAtMs": 1})

    def test_nan_rejected(self):
        with pytest.raises(CursorEncodingError):
            encode_cursor({"savedCount": float("nan"), "createdAtMs": 1})


class TestCursorForSort:
    def test_recent(self):
        cursor = cursor_for_sort("recent", service_date="2025-01-01", saved_count=3, created_at_ms=9)
        assert cursor == RecentCursor("2025-01-01", 9)

    def test_most_saved(self):
        cursor = cursor_for_sort("mostSaved", service_date="2025-01-01", saved_count=3, created_at_ms=9)
        assert cursor == MostSavedCursor(3, 9)
