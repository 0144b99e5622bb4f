"""
Test helper functions and utilities.
"""
from pathlib import Path
from typing import Optional

from mutagen.id3 import ID3, ID3NoHeaderError, TIT2, TPE1, TALB

# No "TAG" bytes, so mutagen finds neither an ID3v2 nor an ID3v1 tag
FAKE_AUDIO_CONTENT = b"fake mp3 content" * 20

# ID3v2.5 header: mutagen refuses to parse it
UNPARSABLE_TAG_HEADER = b"ID3\x05\x00\x00\x00\x00\x00\x00"


def create_test_audio_file(base_dir: Path, name: str, content: bytes = FAKE_AUDIO_CONTENT) -> Path:
    """
    Create an untagged fake audio file.

    Args:
        base_dir: Directory to create the file in
        name: File name (e.g. "123.mp3")
        content: File content

    Returns:
        Path to created file
    """
    file_path = Path(base_dir) / name
    file_path.write_bytes(content)
    return file_path


def create_tagged_audio_file(
    base_dir: Path,
    name: str,
    title: Optional[str] = None,
    artist: Optional[str] = None,
    album: Optional[str] = None,
) -> Path:
    """Create a fake audio file carrying an ID3v2.4 tag written by mutagen."""
    file_path = create_test_audio_file(base_dir, name)
    tags = ID3()
    if title is not None:
        tags.add(TIT2(encoding=3, text=title))
    if artist is not None:
        tags.add(TPE1(encoding=3, text=artist))
    if album is not None:
        tags.add(TALB(encoding=3, text=album))
    tags.save(str(file_path), v2_version=4)
    return file_path


def create_unparsable_audio_file(base_dir: Path, name: str) -> Path:
    """Create a fake audio file whose ID3 header cannot be parsed."""
    return create_test_audio_file(base_dir, name, UNPARSABLE_TAG_HEADER + FAKE_AUDIO_CONTENT)


def read_id3(file_path: Path) -> Optional[ID3]:
    """Read a file's ID3 tag with mutagen, None if it has none."""
    try:
        return ID3(str(file_path))
    except ID3NoHeaderError:
        return None


def make_track_info(**kwargs) -> dict:
    """Create a yt-dlp info dictionary for a single track with optional overrides."""
    info = {
        "id": "123",
        "display_id": "123",
        "title": "Song",
        "uploader": "Artist",
        "webpage_url": "https://www.newgrounds.com/audio/listen/123",
        "url": "https://audio.ngfiles.com/0/123_Song.mp3",
        "upload_date": "20210304",
        "extractor": "Newgrounds",
    }
    info.update(kwargs)
    return {key: value for key, value in info.items() if value is not None}
