"""
Shared pytest fixtures for gdmeta tests.
"""
import tempfile
from pathlib import Path

import pytest

from gdmeta.lookup_client import LookupClient
from gdmeta.models import LookupResult, TrackIdentifier
from gdmeta.tag_store import TagStore


@pytest.fixture
def tmp_test_dir():
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def tag_store():
    """Create a real ID3v2.4 TagStore."""
    return TagStore()


@pytest.fixture
def sample_lookup_result():
    """Lookup result with every field present."""
    return LookupResult(
        title="Song",
        display_id="123",
        uploader="Artist",
        webpage_url="https://www.newgrounds.com/audio/listen/123",
        url="https://audio.ngfiles.com/0/123_Song.mp3",
        upload_date="20210304",
    )


@pytest.fixture
def mock_lookup_client(mocker, sample_lookup_result):
    """Create mock lookup client answering every identifier with the sample result."""
    client = mocker.Mock(spec=LookupClient)

    def lookup(identifier):
        return LookupResult(
            title=f"Song {identifier}",
            display_id=str(identifier),
            uploader=sample_lookup_result.uploader,
        )

    client.lookup.side_effect = lookup
    return client


@pytest.fixture
def mock_tag_store(mocker):
    """Create mock tag store."""
    return mocker.Mock(spec=TagStore)


@pytest.fixture
def track_id():
    """Identifier used by most single-file tests."""
    return TrackIdentifier("123")
