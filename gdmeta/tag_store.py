"""
ID3 tag reading and writing using mutagen.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Type

from mutagen import MutagenError
from mutagen.id3 import (
    ID3,
    TDRC,
    TDRL,
    TIT2,
    TPE1,
    TXXX,
    WOAF,
    WOAS,
    ID3NoHeaderError,
    Frame,
)
from mutagen.id3 import delete as delete_id3
from mutagen.id3 import error as ID3Error

from gdmeta.exceptions import (
    NoTagError,
    TagReadError,
    TagWriteError,
    UnparsableTagError,
)
from gdmeta.models import TagRecord

logger = logging.getLogger(__name__)

CURRENT_ID3_VERSION = 4

# Description of the TXXX frame holding the track identifier
CUSTOM_TEXT_DESC = "display_id"

# Older tagging runs wrote the identifier to a TXXX without description
LEGACY_CUSTOM_TEXT_KEY = "TXXX:"

STAGING_SUFFIX = ".gdmeta-tmp"


class TagStore:
    """Reads and writes TagRecords as ID3v2 tags embedded in audio files."""

    def __init__(self, v2_version: int = CURRENT_ID3_VERSION):
        """
        Initialize tag store.

        Args:
            v2_version: ID3v2 minor version used when writing (3 or 4)
        """
        if v2_version not in (3, 4):
            raise ValueError(f"Unsupported ID3v2 version: 2.{v2_version}")
        self.v2_version = v2_version

    def read(self, path: Path) -> TagRecord:
        """
        Read the tag of an audio file.

        Args:
            path: Path to audio file

        Returns:
            TagRecord with the tag's fields and remaining frames

        Raises:
            NoTagError: If the file has no ID3 tag
            UnparsableTagError: If the tag exists but cannot be parsed
            TagReadError: For any other failure (missing file, permissions)
        """
        try:
            tags = ID3(str(path))
        except ID3NoHeaderError as e:
            raise NoTagError(f"No tag on {path}") from e
        except ID3Error as e:
            # mutagen converts IO failures during load into id3 errors
            if e.args and isinstance(e.args[0], OSError):
                raise TagReadError(f"Error reading tag on {path}: {e}") from e
            raise UnparsableTagError(f"Failed to parse the tag on {path}: {e}") from e
        except (MutagenError, OSError) as e:
            raise TagReadError(f"Error reading tag on {path}: {e}") from e

        return TagRecord(
            title=_first_text(tags, "TIT2"),
            artist=_first_text(tags, "TPE1"),
            release_date=_first_text(tags, "TDRL") or _first_text(tags, "TDRC"),
            source_url=_url(tags, "WOAS"),
            file_url=_url(tags, "WOAF"),
            custom_text=(
                _first_text(tags, f"TXXX:{CUSTOM_TEXT_DESC}")
                or _first_text(tags, LEGACY_CUSTOM_TEXT_KEY)
            ),
            frames=tags,
        )

    def read_or_empty(self, path: Path) -> TagRecord:
        """
        Read the tag of an audio file, starting over on absent or broken tags.

        Args:
            path: Path to audio file

        Returns:
            The file's TagRecord, or an empty one if it has no usable tag

        Raises:
            TagReadError: If the file could not be read at all
        """
        name = Path(path).name
        try:
            record = self.read(path)
            logger.debug(f"Found a tag on {name}")
            return record
        except NoTagError:
            logger.debug(f"No tag on {name}")
        except UnparsableTagError as e:
            logger.warning(f"{e}, giving it a new tag")
        return TagRecord()

    def write(self, path: Path, record: TagRecord, v2_version: Optional[int] = None) -> None:
        """
        Write a TagRecord to an audio file, replacing its ID3v2 tag.

        The tag is written to a copy of the file which then replaces the
        original, so a failed write leaves the file as it was.

        Args:
            path: Path to audio file
            record: Record to write
            v2_version: ID3v2 minor version, defaults to the store's version

        Raises:
            TagWriteError: If the file could not be written
        """
        path = Path(path)
        version = v2_version or self.v2_version
        tags = self._build_tags(record)
        if version == 3:
            # v2.3 has no TDRL; mutagen splits TDRC into TYER/TDAT
            if record.release_date is not None:
                _set_text(tags, "TDRC", TDRC, record.release_date)
            tags.update_to_v23()

        staged = path.with_name(path.name + STAGING_SUFFIX)
        try:
            shutil.copy2(path, staged)
            # Drop whatever tag is there, parseable or not
            delete_id3(str(staged), delete_v1=False)
            tags.save(str(staged), v2_version=version)
            os.replace(staged, path)
        except (MutagenError, OSError) as e:
            raise TagWriteError(f"Tag failed to write to {path}: {e}") from e
        finally:
            if staged.exists():
                try:
                    staged.unlink()
                except OSError as e:
                    logger.warning(f"Could not remove staged file {staged}: {e}")

    def _build_tags(self, record: TagRecord) -> ID3:
        """Build the ID3 frame set for a record."""
        tags = ID3()
        if record.frames is not None:
            for frame in record.frames.values():
                tags.add(frame)

        _set_text(tags, "TIT2", TIT2, record.title)
        _set_text(tags, "TPE1", TPE1, record.artist)
        _set_text(tags, "TDRL", TDRL, record.release_date)
        _set_url(tags, "WOAS", WOAS, record.source_url)
        _set_url(tags, "WOAF", WOAF, record.file_url)

        tags.delall(f"TXXX:{CUSTOM_TEXT_DESC}")
        tags.delall(LEGACY_CUSTOM_TEXT_KEY)
        if record.custom_text is not None:
            tags.add(TXXX(encoding=3, desc=CUSTOM_TEXT_DESC, text=record.custom_text))
        return tags


def _first_text(tags: ID3, key: str) -> Optional[str]:
    frame = tags.get(key)
    if frame is None or not frame.text:
        return None
    return str(frame.text[0])


def _url(tags: ID3, key: str) -> Optional[str]:
    frames = tags.getall(key)
    if not frames:
        return None
    return frames[0].url


def _set_text(tags: ID3, frame_id: str, frame_cls: Type[Frame], value: Optional[str]) -> None:
    tags.delall(frame_id)
    if value is not None:
        tags.add(frame_cls(encoding=3, text=value))


def _set_url(tags: ID3, frame_id: str, frame_cls: Type[Frame], value: Optional[str]) -> None:
    tags.delall(frame_id)
    if value is not None:
        tags.add(frame_cls(url=value))
