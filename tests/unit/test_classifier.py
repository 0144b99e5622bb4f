"""
Unit tests for FileClassifier.
"""
import pytest

from gdmeta.classifier import ClassifyMode, FileClassifier, classify
from gdmeta.exceptions import ClassificationError, TagReadError
from gdmeta.models import TagRecord, TrackIdentifier

from helpers import (
    create_tagged_audio_file,
    create_test_audio_file,
    create_unparsable_audio_file,
)


@pytest.fixture
def classifier(tag_store):
    """Create FileClassifier backed by a real TagStore."""
    return FileClassifier(tag_store=tag_store)


def ids(identifiers):
    return [str(identifier) for identifier in identifiers]


class TestListAudioFiles:
    """Test file name matching."""

    def test_matches_numeric_mp3_only(self, classifier, tmp_test_dir):
        """Test that only <digits>.mp3 files are listed."""
        for name in ["1.mp3", "22.mp3", "song.mp3", "3a.mp3", "4.MP3", "5.mp3.bak", "6.ogg", ".mp3"]:
            create_test_audio_file(tmp_test_dir, name)
        (tmp_test_dir / "7.mp3").mkdir()

        names = [path.name for path in classifier.list_audio_files(tmp_test_dir)]
        assert names == ["1.mp3", "22.mp3"]

    def test_other_extension(self, tag_store, tmp_test_dir):
        """Test that the extension is configurable."""
        create_test_audio_file(tmp_test_dir, "1.ogg")
        create_test_audio_file(tmp_test_dir, "2.mp3")
        classifier = FileClassifier(tag_store=tag_store, extension="ogg")

        assert [path.name for path in classifier.list_audio_files(tmp_test_dir)] == ["1.ogg"]

    def test_missing_directory(self, classifier, tmp_test_dir):
        """Test that a missing base directory is a classification error."""
        with pytest.raises(ClassificationError):
            classifier.list_audio_files(tmp_test_dir / "nope")


class TestClassify:
    """Test classification modes."""

    def test_non_title_mode(self, classifier, tmp_test_dir):
        """Test that untagged, broken and untitled files need metadata."""
        create_test_audio_file(tmp_test_dir, "1.mp3")
        create_unparsable_audio_file(tmp_test_dir, "2.mp3")
        create_tagged_audio_file(tmp_test_dir, "3.mp3", artist="Only Artist")
        create_tagged_audio_file(tmp_test_dir, "4.mp3", title="Has Title")

        result = classifier.classify(tmp_test_dir, ClassifyMode.NON_TITLE)
        assert ids(result) == ["1", "2", "3"]

    def test_all_mode(self, classifier, tmp_test_dir):
        """Test that all mode ignores tag state."""
        create_test_audio_file(tmp_test_dir, "1.mp3")
        create_tagged_audio_file(tmp_test_dir, "2.mp3", title="Has Title")

        result = classifier.classify(tmp_test_dir, ClassifyMode.ALL)
        assert result == [TrackIdentifier("1"), TrackIdentifier("2")]

    def test_mode_from_string(self, classifier, tmp_test_dir):
        """Test that modes can be passed by value."""
        create_tagged_audio_file(tmp_test_dir, "2.mp3", title="Has Title")
        assert ids(classifier.classify(tmp_test_dir, "all")) == ["2"]

    def test_read_error_excludes_file(self, mock_tag_store, tmp_test_dir):
        """Test that a file whose tag cannot be read is left out and the scan continues."""
        create_test_audio_file(tmp_test_dir, "1.mp3")
        create_test_audio_file(tmp_test_dir, "2.mp3")

        def read_or_empty(path):
            if path.name == "1.mp3":
                raise TagReadError("permission denied")
            return TagRecord()

        mock_tag_store.read_or_empty.side_effect = read_or_empty
        classifier = FileClassifier(tag_store=mock_tag_store)

        assert ids(classifier.classify(tmp_test_dir)) == ["2"]

    def test_all_mode_does_not_read_tags(self, mock_tag_store, tmp_test_dir):
        """Test that all mode never touches tags."""
        create_test_audio_file(tmp_test_dir, "1.mp3")
        FileClassifier(tag_store=mock_tag_store).classify(tmp_test_dir, ClassifyMode.ALL)
        mock_tag_store.read_or_empty.assert_not_called()

    def test_empty_directory(self, classifier, tmp_test_dir):
        """Test that an empty directory yields no identifiers."""
        assert classifier.classify(tmp_test_dir) == []

    def test_classify_function(self, tmp_test_dir):
        """Test the module-level classify helper."""
        create_test_audio_file(tmp_test_dir, "123.mp3")
        assert ids(classify(tmp_test_dir)) == ["123"]
