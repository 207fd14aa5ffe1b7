"""Tests for lib.clips module."""

from datetime import datetime, timezone

import pytest

from lib.clips import (
    ClipRecord,
    clip_from_document,
    dedupe_by_id,
    episode_number,
    extract_video_id,
    parse_timestamp,
    to_summary,
)


class TestClipFromDocument:
    def test_video_id_alias_order(self):
        data = {"sourceVideoId": "src", "videoId": "vid", "video_id": "vid_"}
        assert clip_from_document("c1", data).video_id == "src"
        assert clip_from_document("c1", {"videoId": "vid", "video_id": "vid_"}).video_id == "vid"
        assert clip_from_document("c1", {"video_id": "vid_"}).video_id == "vid_"

    def test_empty_alias_skipped(self):
        record = clip_from_document("c1", {"sourceVideoId": "", "videoId": "vid"})
        assert record.video_id == "vid"

    def test_time_aliases(self):
        record = clip_from_document("c1", {"startSec": 10, "endSec": 70})
        assert (record.start_sec, record.end_sec) == (10, 70)
        record = clip_from_document("c1", {"startTimeSeconds": 5, "startSec": 10, "endTimeSeconds": 50})
        assert (record.start_sec, record.end_sec) == (5, 50)

    def test_title_prefers_short_title(self):
        assert clip_from_document("c1", {"titleShort": "Short", "title": "Long"}).title_short == "Short"
        assert clip_from_document("c1", {"title": "Long"}).title_short == "Long"

    def test_thumbnail_fallback(self):
        record = clip_from_document("c1", {"videoId": "abc"})
        assert record.thumb_url == "https://i.ytimg.com/vi/abc/hqdefault.jpg"

    def test_thumbnail_kept(self):
        record = clip_from_document("c1", {"videoId": "abc", "thumbUrl": "https://x/y.jpg"})
        assert record.thumb_url == "https://x/y.jpg"

    def test_no_video_no_thumbnail(self):
        assert clip_from_document("c1", {}).thumb_url == ""

    def test_defaults(self):
        record = clip_from_document("c1", {})
        assert record == ClipRecord(id="c1")
        assert record.created_at_ms == 0

    def test_bad_saved_count(self):
        assert clip_from_document("c1", {"savedCount": "lots"}).saved_count == 0

    def test_numeric_episode_coerced(self):
        assert clip_from_document("c1", {"episode": 12}).episode == "12"


class TestParseTimestamp:
    def test_datetime(self):
        dt = datetime(2025, 2, 2, 10, tzinfo=timezone.utc)
        assert parse_timestamp(dt) == dt

    def test_naive_datetime_is_utc(self):
        assert parse_timestamp(datetime(2025, 2, 2)).tzinfo == timezone.utc

    def test_iso_string_with_z(self):
        assert parse_timestamp("2025-02-02T10:00:00Z") == datetime(2025, 2, 2, 10, tzinfo=timezone.utc)

    def test_epoch_millis(self):
        assert parse_timestamp(1738490400000) == datetime(2025, 2, 2, 10, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "yesterday"])
    def test_unusable(self, value):
        assert parse_timestamp(value) is None

    def test_created_at_ms(self):
        record = clip_from_document("c1", {"createdAt": "2025-02-02T10:00:00Z"})
        assert record.created_at_ms == 1738490400000


class TestEpisodeNumber:
    @pytest.mark.parametrize("text,expected", [
        ("EP001", 1),
        ("EP007", 7),
        ("Episode 12 part 3", 12),
        ("7", 7),
        ("Special", None),
        ("", None),
        (None, None),
    ])
    def test_first_digit_run(self, text, expected):
        assert episode_number(text) == expected


class TestSummary:
    def test_summary_fields(self):
        record = clip_from_document("c1", {
            "videoId": "abc",
            "startSec": 10,
            "endSec": 70,
            "episode": "EP003",
            "createdAt": "2025-02-02T10:00:00Z",
        })
        summary = to_summary(record)
        assert summary["id"] == "c1"
        assert summary["videoId"] == "abc"
        assert summary["startSec"] == 10
        assert summary["endSec"] == 70
        assert summary["savedCount"] == 0
        assert summary["thumbUrl"].endswith("/abc/hqdefault.jpg")
        assert summary["createdAt"] == "2025-02-02T10:00:00+00:00"

    def test_missing_created_at(self):
        assert to_summary(ClipRecord(id="c1"))["createdAt"] is None


class TestDedupe:
    def test_keeps_first(self):
        records = [
            ClipRecord(id="a", title_short="first"),
            ClipRecord(id="b"),
            ClipRecord(id="a", title_short="second"),
        ]
        result = dedupe_by_id(records)
        assert [r.id for r in result] == ["a", "b"]
        assert result[0].title_short == "first"


class TestExtractVideoId:
    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtube.com/watch?v=dQw4w9WgXcQ&t=42s",
        "https://youtu.be/dQw4w9WgXcQ?si=abc",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "https://www.youtube.com/shorts/dQw4w9WgXcQ",
        "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
    ])
    def test_variants(self, url):
        assert extract_video_id(url) == "dQw4w9WgXcQ"

    def test_not_youtube(self):
        with pytest.raises(ValueError, match="Could not extract video ID"):
            extract_video_id("https://vimeo.com/12345")
