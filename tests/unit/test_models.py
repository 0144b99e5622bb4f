"""
Unit tests for data models.
"""
import pytest
from pathlib import Path

from gdmeta.exceptions import InvalidTrackIdentifierError
from gdmeta.models import (
    FailureReason,
    LookupResult,
    RunOutcome,
    TagRecord,
    TrackIdentifier,
)


class TestTrackIdentifier:
    """Test TrackIdentifier value type."""

    def test_valid_identifier(self):
        """Test creating an identifier from a digit string."""
        identifier = TrackIdentifier("467339")
        assert identifier.value == "467339"
        assert str(identifier) == "467339"

    @pytest.mark.parametrize("value", ["", "12a", "abc", " 12", "12.mp3", "-1"])
    def test_invalid_identifier(self, value):
        """Test that non-digit strings are rejected."""
        with pytest.raises(InvalidTrackIdentifierError):
            TrackIdentifier(value)

    def test_invalid_identifier_is_value_error(self):
        """Test that invalid identifiers can be caught as ValueError."""
        with pytest.raises(ValueError):
            TrackIdentifier("nope")

    def test_from_path(self):
        """Test deriving an identifier from a file path."""
        identifier = TrackIdentifier.from_path(Path("/music/123.mp3"))
        assert identifier == TrackIdentifier("123")

    def test_from_path_non_numeric_stem(self):
        """Test that a non-numeric stem is rejected."""
        with pytest.raises(InvalidTrackIdentifierError):
            TrackIdentifier.from_path(Path("/music/song.mp3"))

    def test_path_in(self):
        """Test resolving an identifier to a file path."""
        identifier = TrackIdentifier("123")
        assert identifier.file_name("mp3") == "123.mp3"
        assert identifier.path_in(Path("/music"), "mp3") == Path("/music/123.mp3")

    def test_hashable(self):
        """Test that identifiers can be used as dictionary keys."""
        lookup = {TrackIdentifier("1"): "a"}
        assert lookup[TrackIdentifier("1")] == "a"


class TestTagRecord:
    """Test TagRecord model."""

    def test_default_is_empty(self):
        """Test that a new record is empty."""
        record = TagRecord()
        assert record.is_empty()
        assert record.frames is None

    def test_record_with_title_not_empty(self):
        """Test that any set field makes the record non-empty."""
        assert not TagRecord(title="Song").is_empty()
        assert not TagRecord(custom_text="123").is_empty()

    def test_frames_not_compared(self):
        """Test that carried frames do not affect equality."""
        assert TagRecord(title="Song", frames=object()) == TagRecord(title="Song")


class TestLookupResult:
    """Test LookupResult model."""

    def test_from_info(self):
        """Test building a result from a yt-dlp info dictionary."""
        result = LookupResult.from_info(
            {
                "title": "Song",
                "display_id": 123,
                "uploader": "Artist",
                "webpage_url": "https://www.newgrounds.com/audio/listen/123",
                "upload_date": "20210304",
                "duration": 120,
            }
        )
        assert result.title == "Song"
        assert result.display_id == "123"
        assert result.uploader == "Artist"
        assert result.url is None
        assert result.upload_date == "20210304"

    def test_from_info_missing_fields(self):
        """Test that missing keys become None."""
        result = LookupResult.from_info({})
        assert result.title is None
        assert result.display_id is None


class TestRunOutcome:
    """Test RunOutcome aggregation."""

    def test_counters(self):
        """Test that each record call updates its counter."""
        outcome = RunOutcome()
        outcome.record_written("1")
        outcome.record_skipped("2", FailureReason.NOT_FOUND, "HTTP Error 404")
        outcome.record_failure("3", FailureReason.PLAYLIST)

        assert outcome.written == 1
        assert outcome.skipped == 1
        assert outcome.failed == 1
        assert outcome.total == 3
        assert outcome.not_found == 1
        assert outcome.written_ids == ["1"]

    def test_reasons(self):
        """Test failure reasons per identifier."""
        outcome = RunOutcome()
        outcome.record_failure("3", FailureReason.MISSING_DISPLAY_ID)
        assert outcome.reasons() == {"3": FailureReason.MISSING_DISPLAY_ID}

    def test_playlist_reason_text(self):
        """Test the user-facing text of the playlist failure."""
        assert FailureReason.PLAYLIST.value == "batch results unsupported"
