"""
Data models for gdmeta.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from gdmeta.exceptions import InvalidTrackIdentifierError

if TYPE_CHECKING:
    from mutagen.id3 import ID3

_IDENTIFIER_PATTERN = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class TrackIdentifier:
    """
    Numeric filename stem addressing one audio file.

    The same value is the lookup key, the file name stem and the
    back-reference stored in the tag, so construction is validated.
    """

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not _IDENTIFIER_PATTERN.fullmatch(self.value):
            raise InvalidTrackIdentifierError(
                f"Track identifier must be a non-empty digit string, got {self.value!r}"
            )

    @classmethod
    def from_path(cls, path: Path) -> "TrackIdentifier":
        """Build an identifier from the stem of an audio file path."""
        stem = Path(path).stem
        if not stem:
            raise InvalidTrackIdentifierError(f"File has no stem: {path}")
        return cls(stem)

    def file_name(self, extension: str) -> str:
        """File name for this identifier with the given extension (no dot)."""
        return f"{self.value}.{extension}"

    def path_in(self, base_dir: Path, extension: str) -> Path:
        """Path of this identifier's file inside base_dir."""
        return Path(base_dir) / self.file_name(extension)

    def __str__(self) -> str:
        return self.value


@dataclass
class TagRecord:
    """In-file metadata block for one audio file."""

    title: Optional[str] = None
    artist: Optional[str] = None
    release_date: Optional[str] = None  # ID3 timestamp text, e.g. "2021-03-04"
    source_url: Optional[str] = None  # WOAS
    file_url: Optional[str] = None  # WOAF
    custom_text: Optional[str] = None  # TXXX back-reference to the identifier

    # Remaining frames of the tag this record was read from (not compared)
    frames: Optional["ID3"] = field(default=None, compare=False, repr=False)

    def is_empty(self) -> bool:
        """True if no metadata field is set."""
        return not any(
            (
                self.title,
                self.artist,
                self.release_date,
                self.source_url,
                self.file_url,
                self.custom_text,
            )
        )


@dataclass
class LookupResult:
    """Remote metadata record for a single track."""

    title: Optional[str]
    display_id: Optional[str] = None
    uploader: Optional[str] = None
    webpage_url: Optional[str] = None
    url: Optional[str] = None
    upload_date: Optional[str] = None  # YYYYMMDD

    @classmethod
    def from_info(cls, info: Dict[str, Any]) -> "LookupResult":
        """
        Create a LookupResult from a yt-dlp info dictionary.

        Args:
            info: Info dict as returned by YoutubeDL.extract_info

        Returns:
            LookupResult instance
        """

        def _text(key: str) -> Optional[str]:
            value = info.get(key)
            if value is None:
                return None
            return str(value)

        return cls(
            title=_text("title"),
            display_id=_text("display_id"),
            uploader=_text("uploader"),
            webpage_url=_text("webpage_url"),
            url=_text("url"),
            upload_date=_text("upload_date"),
        )


@dataclass
class PlaylistResult:
    """Multi-entry lookup response. Not supported by the pipelines."""

    title: Optional[str] = None
    entry_count: int = 0


LookupResponse = Union[LookupResult, PlaylistResult]


class FailureReason(str, Enum):
    """Classified reason for a per-item failure or skip."""

    NOT_FOUND = "not found"
    LOOKUP_FAILED = "lookup failed"
    TIMEOUT = "lookup timed out"
    PLAYLIST = "batch results unsupported"
    MISSING_TITLE = "missing title"
    MISSING_DISPLAY_ID = "missing display identifier"
    INVALID_DISPLAY_ID = "invalid display identifier"
    TAG_READ_FAILED = "tag read failed"
    INVALID_UPLOAD_DATE = "invalid upload date"
    TAG_WRITE_FAILED = "tag write failed"


@dataclass
class ItemFailure:
    """One failed or skipped item of a run."""

    identifier: str
    reason: FailureReason
    detail: Optional[str] = None


@dataclass
class RunOutcome:
    """Aggregated result of one pipeline invocation."""

    written: int = 0
    skipped: int = 0
    failed: int = 0
    failures: List[ItemFailure] = field(default_factory=list)
    skips: List[ItemFailure] = field(default_factory=list)
    written_ids: List[str] = field(default_factory=list)

    def record_written(self, identifier: str) -> None:
        self.written += 1
        self.written_ids.append(str(identifier))

    def record_skipped(
        self, identifier: str, reason: FailureReason, detail: Optional[str] = None
    ) -> None:
        self.skipped += 1
        self.skips.append(ItemFailure(identifier=str(identifier), reason=reason, detail=detail))

    def record_failure(
        self, identifier: str, reason: FailureReason, detail: Optional[str] = None
    ) -> None:
        self.failed += 1
        self.failures.append(ItemFailure(identifier=str(identifier), reason=reason, detail=detail))

    @property
    def total(self) -> int:
        """Number of items that reached a final state."""
        return self.written + self.skipped + self.failed

    @property
    def not_found(self) -> int:
        """Number of items the lookup service reported as missing."""
        return sum(1 for skip in self.skips if skip.reason == FailureReason.NOT_FOUND)

    def reasons(self) -> Dict[str, FailureReason]:
        """Failure reason per identifier."""
        return {failure.identifier: failure.reason for failure in self.failures}
