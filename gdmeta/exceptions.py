"""
Custom exceptions for gdmeta.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from gdmeta.models import RunOutcome


class GDMetaError(Exception):
    """Base exception for all gdmeta errors."""


class ConfigError(GDMetaError):
    """Configuration errors."""


class InvalidTrackIdentifierError(GDMetaError, ValueError):
    """A file stem or string is not a usable track identifier."""


class ClassificationError(GDMetaError):
    """Directory scanning failed in a way that invalidates the whole batch."""


class TagStoreError(GDMetaError):
    """Base class for tag read/write errors."""


class NoTagError(TagStoreError):
    """The file carries no ID3 tag."""


class UnparsableTagError(TagStoreError):
    """The file carries an ID3 tag that cannot be parsed."""


class TagReadError(TagStoreError):
    """Any other failure while reading a tag (missing file, permissions, ...)."""


class TagWriteError(TagStoreError):
    """Writing a tag back to the file failed."""


class MetadataLookupError(GDMetaError):
    """Base class for remote lookup errors."""


class LookupTransportError(MetadataLookupError):
    """The lookup subsystem itself is broken."""


class LookupPayloadError(MetadataLookupError):
    """The lookup service returned something that is not a metadata record."""


class LookupExitError(MetadataLookupError):
    """The lookup ran but reported failure (HTTP errors, extractor errors)."""

    def __init__(self, returncode: int, stderr: str):
        super().__init__(f"Lookup exited with code {returncode}: {stderr}")
        self.returncode = returncode
        self.stderr = stderr


class LookupTimeoutError(MetadataLookupError):
    """The lookup did not answer within the socket timeout."""


class RunAbortedError(GDMetaError):
    """A pipeline run stopped early on an infrastructure-level fault."""

    def __init__(self, message: str, outcome: Optional["RunOutcome"] = None):
        super().__init__(message)
        self.outcome = outcome
