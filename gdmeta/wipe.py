"""
Wipe pipeline: replaces the tag of every file with an empty one.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from gdmeta.exceptions import RunAbortedError, TagWriteError
from gdmeta.models import RunOutcome, TagRecord, TrackIdentifier
from gdmeta.tag_store import TagStore

logger = logging.getLogger(__name__)


class WipePipeline:
    """Sequentially overwrites tags with empty ones; stops at the first failure."""

    def __init__(self, tag_store: Optional[TagStore] = None, extension: str = "mp3"):
        self.tag_store = tag_store or TagStore()
        self.extension = extension

    def run(self, base_dir: Path, identifiers: Iterable[Union[TrackIdentifier, str]]) -> RunOutcome:
        """
        Wipe the tag of every identifier's file.

        Args:
            base_dir: Directory holding the audio files
            identifiers: Identifiers to wipe

        Returns:
            RunOutcome with one written entry per file

        Raises:
            RunAbortedError: On the first write failure; carries the partial
                outcome and no later file is touched
        """
        outcome = RunOutcome()

        for identifier in identifiers:
            if not isinstance(identifier, TrackIdentifier):
                identifier = TrackIdentifier(str(identifier))
            file_path = identifier.path_in(base_dir, self.extension)

            try:
                self.tag_store.write(file_path, TagRecord())
            except TagWriteError as e:
                logger.error(f"Wipe stopped at {file_path.name}: {e}")
                raise RunAbortedError(f"Failed to wipe {file_path}: {e}", outcome) from e

            outcome.record_written(identifier)
            logger.debug(f"File {file_path} had metadata wiped")

        logger.info(f"Wiped metadata from {outcome.written} files")
        return outcome


def wipe(
    base_dir: Path,
    identifiers: Iterable[Union[TrackIdentifier, str]],
    tag_store: Optional[TagStore] = None,
    extension: str = "mp3",
) -> RunOutcome:
    """
    Wipe the tags of the given files.

    Args:
        base_dir: Directory holding the audio files
        identifiers: Identifiers to wipe
        tag_store: Optional TagStore (ID3v2.4 otherwise)
        extension: Audio file extension without the dot

    Returns:
        RunOutcome
    """
    return WipePipeline(tag_store=tag_store, extension=extension).run(base_dir, identifiers)
