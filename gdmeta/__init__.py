"""
Core modules for gdmeta metadata tagging.
"""

from gdmeta.classifier import ClassifyMode, FileClassifier, classify
from gdmeta.exceptions import (
    ClassificationError,
    ConfigError,
    GDMetaError,
    MetadataLookupError,
    RunAbortedError,
    TagStoreError,
)
from gdmeta.ingest import IngestPipeline, ingest
from gdmeta.lookup_client import LookupClient
from gdmeta.models import (
    FailureReason,
    LookupResult,
    PlaylistResult,
    RunOutcome,
    TagRecord,
    TrackIdentifier,
)
from gdmeta.tag_store import TagStore
from gdmeta.wipe import WipePipeline, wipe

__version__ = "0.1.0"

__all__ = [
    "TagStore",
    "LookupClient",
    "FileClassifier",
    "ClassifyMode",
    "IngestPipeline",
    "WipePipeline",
    "classify",
    "ingest",
    "wipe",
    "TrackIdentifier",
    "TagRecord",
    "LookupResult",
    "PlaylistResult",
    "RunOutcome",
    "FailureReason",
    "GDMetaError",
    "ConfigError",
    "ClassificationError",
    "TagStoreError",
    "MetadataLookupError",
    "RunAbortedError",
]
