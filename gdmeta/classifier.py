"""
Directory scanning and classification of audio files.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import List, Optional

from gdmeta.exceptions import (
    ClassificationError,
    InvalidTrackIdentifierError,
    TagReadError,
)
from gdmeta.models import TrackIdentifier
from gdmeta.tag_store import TagStore

logger = logging.getLogger(__name__)


class ClassifyMode(str, Enum):
    """Which matching files a scan returns."""

    NON_TITLE = "non-title"  # Files whose tag has no title yet
    ALL = "all"  # Every matching file (wipe)


class FileClassifier:
    """Lists numerically named audio files and picks the ones that need work."""

    def __init__(self, tag_store: Optional[TagStore] = None, extension: str = "mp3"):
        """
        Initialize classifier.

        Args:
            tag_store: TagStore used to inspect existing tags
            extension: Audio file extension without the dot (case-sensitive)
        """
        self.tag_store = tag_store or TagStore()
        self.extension = extension
        self.pattern = re.compile(rf"[0-9]+\.{re.escape(extension)}")

    def list_audio_files(self, base_dir: Path) -> List[Path]:
        """
        List files in base_dir named ``<digits>.<extension>``.

        Args:
            base_dir: Directory to scan (not recursive)

        Returns:
            Matching paths sorted by file name

        Raises:
            ClassificationError: If base_dir is not a readable directory
        """
        base_dir = Path(base_dir)
        if not base_dir.is_dir():
            raise ClassificationError(f"Not a directory: {base_dir}")

        try:
            entries = sorted(base_dir.iterdir())
        except OSError as e:
            raise ClassificationError(f"Failed to list {base_dir}: {e}") from e

        return [
            entry
            for entry in entries
            if self.pattern.fullmatch(entry.name) and entry.is_file()
        ]

    def classify(self, base_dir: Path, mode: ClassifyMode = ClassifyMode.NON_TITLE) -> List[TrackIdentifier]:
        """
        Scan base_dir and return the identifiers to process.

        Args:
            base_dir: Directory holding the audio files
            mode: NON_TITLE to return untitled files only, ALL for every file

        Returns:
            List of TrackIdentifiers

        Raises:
            ClassificationError: If the directory cannot be scanned or a
                matched file name does not yield an identifier
        """
        mode = ClassifyMode(mode)
        paths = self.list_audio_files(base_dir)
        logger.debug(f"Found {len(paths)} audio files in {base_dir}")

        identifiers = []
        for path in paths:
            if mode == ClassifyMode.NON_TITLE and not self._needs_metadata(path):
                continue
            try:
                identifiers.append(TrackIdentifier.from_path(path))
            except InvalidTrackIdentifierError as e:
                raise ClassificationError(f"Matched file {path.name} has no usable stem: {e}") from e

        logger.info(f"Classified {len(identifiers)} of {len(paths)} files ({mode.value})")
        return identifiers

    def _needs_metadata(self, path: Path) -> bool:
        """True if the file's tag is missing, broken or untitled."""
        logger.debug(f"Checking {path.name}...")
        try:
            record = self.tag_store.read_or_empty(path)
        except TagReadError as e:
            logger.error(f"{e}, leaving {path.name} out of this run")
            return False

        if not record.title:
            logger.info(f"{path.name} has no title, will write!")
            return True
        return False


def classify(base_dir: Path, mode: ClassifyMode = ClassifyMode.NON_TITLE, extension: str = "mp3") -> List[TrackIdentifier]:
    """
    Classify the audio files of a directory.

    Args:
        base_dir: Directory holding the audio files
        mode: Classification mode
        extension: Audio file extension without the dot

    Returns:
        List of TrackIdentifiers
    """
    return FileClassifier(extension=extension).classify(base_dir, mode)
