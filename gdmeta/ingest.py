"""
Metadata ingestion pipeline.

Looks up every identifier with bounded parallelism, reconciles each answer
against the tag already on disk and writes the merged tag back. Per-item
problems are recorded in the RunOutcome; only a broken lookup subsystem
aborts the run.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from gdmeta.exceptions import (
    InvalidTrackIdentifierError,
    LookupExitError,
    LookupPayloadError,
    LookupTimeoutError,
    LookupTransportError,
    RunAbortedError,
    TagReadError,
    TagWriteError,
)
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

logger = logging.getLogger(__name__)

NOT_FOUND_SIGNATURE = "HTTP Error 404"

# Number of TagRecord fields a lookup can fill
MERGEABLE_FIELDS = 6


def parse_upload_date(upload_date: str) -> str:
    """
    Convert a YYYYMMDD upload date into an ID3 timestamp.

    Args:
        upload_date: Date string such as "20210304"

    Returns:
        Timestamp text such as "2021-03-04"

    Raises:
        ValueError: If the string is not a valid YYYYMMDD date
    """
    if len(upload_date) != 8 or not upload_date.isdigit():
        raise ValueError(f"Upload date is not in YYYYMMDD form: {upload_date!r}")
    return datetime.strptime(upload_date, "%Y%m%d").date().isoformat()


def merge_lookup_result(record: TagRecord, result: LookupResult, display_id: str) -> int:
    """
    Merge a lookup result into a tag record in place.

    Title and back-reference are always overwritten; the other fields only
    when the lookup provides them.

    Args:
        record: Record read from the file (or an empty one)
        result: Lookup result with a title
        display_id: Identifier to store as back-reference

    Returns:
        Number of fields set

    Raises:
        ValueError: If the upload date cannot be parsed
    """
    record.title = result.title
    count = 1
    logger.debug(f"Set title for {display_id} to {result.title}")

    if result.uploader is not None:
        record.artist = result.uploader
        count += 1
        logger.debug(f"Set artist for {display_id} to {result.uploader}")

    if result.upload_date is not None:
        record.release_date = parse_upload_date(result.upload_date)
        count += 1
        logger.debug(f"Set upload date for {display_id} to {result.upload_date}")

    if result.webpage_url is not None:
        record.source_url = result.webpage_url
        count += 1
        logger.debug(f"Set audio source webpage for {display_id} to {result.webpage_url}")

    if result.url is not None:
        record.file_url = result.url
        count += 1
        logger.debug(f"Set audio file webpage for {display_id} to {result.url}")

    record.custom_text = display_id
    count += 1
    return count


class IngestPipeline:
    """
    Runs lookups in a thread pool and reconciles results as they arrive.

    Lookups are the only work done on pool threads. Results are consumed
    with as_completed on the calling thread, which also does all tag I/O
    and owns the RunOutcome, so no locking is needed.
    """

    def __init__(
        self,
        lookup_client: Optional[LookupClient] = None,
        tag_store: Optional[TagStore] = None,
        extension: str = "mp3",
    ):
        """
        Initialize ingestion pipeline.

        Args:
            lookup_client: Client used for remote lookups
            tag_store: Store used to read and write tags
            extension: Audio file extension without the dot
        """
        self.lookup_client = lookup_client or LookupClient()
        self.tag_store = tag_store or TagStore()
        self.extension = extension

    def run(
        self,
        base_dir: Path,
        identifiers: Iterable[Union[TrackIdentifier, str]],
        concurrency_limit: int,
    ) -> RunOutcome:
        """
        Look up and tag every identifier.

        Args:
            base_dir: Directory holding the audio files
            identifiers: Identifiers to process
            concurrency_limit: Maximum number of lookups in flight

        Returns:
            RunOutcome with per-item results

        Raises:
            ValueError: If concurrency_limit is below 1 or an identifier is invalid
            RunAbortedError: If the lookup subsystem failed; carries the
                partial outcome
        """
        if concurrency_limit < 1:
            raise ValueError(f"concurrency_limit must be at least 1, got {concurrency_limit}")

        base_dir = Path(base_dir)
        pending = _coerce_identifiers(identifiers)
        outcome = RunOutcome()

        if not pending:
            logger.info("No files need metadata")
            return outcome

        logger.info(f"Looking up {len(pending)} tracks with {concurrency_limit} parallel requests")
        start_time = time.time()

        with ThreadPoolExecutor(max_workers=concurrency_limit) as executor:
            futures: Dict[Future, TrackIdentifier] = {
                executor.submit(self.lookup_client.lookup, identifier): identifier
                for identifier in pending
            }

            try:
                for future in as_completed(futures):
                    self._handle_completed(base_dir, futures[future], future, outcome)
            except (LookupTransportError, LookupPayloadError) as e:
                logger.error(f"Aborting run, lookup subsystem failed: {e}")
                raise RunAbortedError(f"Lookup subsystem failed: {e}", outcome) from e
            except KeyboardInterrupt:
                logger.warning("Interrupted by user, cancelling remaining lookups...")
                raise
            finally:
                # Stop starting new lookups; running ones drain on executor exit
                for f in futures:
                    f.cancel()

        elapsed = time.time() - start_time
        logger.info(
            f"Ingestion complete in {elapsed:.1f}s: "
            f"{outcome.written} written, "
            f"{outcome.skipped} skipped, "
            f"{outcome.failed} failed"
        )
        return outcome

    def _handle_completed(
        self,
        base_dir: Path,
        identifier: TrackIdentifier,
        future: Future,
        outcome: RunOutcome,
    ) -> None:
        """Classify one finished lookup and reconcile it if usable."""
        try:
            response = future.result()
        except LookupExitError as e:
            if NOT_FOUND_SIGNATURE in e.stderr:
                logger.error(f"{identifier} seems to have 404ed! Check that it exists.\n{e.stderr}")
                outcome.record_skipped(identifier, FailureReason.NOT_FOUND, e.stderr)
            else:
                logger.error(f"yt-dlp exited with code {e.returncode} for {identifier} -- {e.stderr}")
                outcome.record_failure(identifier, FailureReason.LOOKUP_FAILED, e.stderr)
            return
        except LookupTimeoutError as e:
            logger.error(f"Lookup for {identifier} timed out")
            outcome.record_failure(identifier, FailureReason.TIMEOUT, str(e))
            return

        if isinstance(response, PlaylistResult):
            logger.error(
                f"{identifier} seems to have been a playlist "
                f"({response.entry_count} entries)! We can't process those."
            )
            outcome.record_failure(identifier, FailureReason.PLAYLIST)
            return

        self._reconcile(base_dir, identifier, response, outcome)

    def _reconcile(
        self,
        base_dir: Path,
        identifier: TrackIdentifier,
        result: LookupResult,
        outcome: RunOutcome,
    ) -> None:
        """Merge a single-track result into the file's tag and write it."""
        if not result.title:
            logger.error(f"Lookup for {identifier} returned no title")
            outcome.record_failure(identifier, FailureReason.MISSING_TITLE)
            return

        logger.debug(f"Successfully parsed {result.title}")

        # The display ID is the only way back to the song file
        if not result.display_id:
            logger.error(f"Song {result.title} does not have a display ID")
            outcome.record_failure(identifier, FailureReason.MISSING_DISPLAY_ID)
            return

        try:
            display_id = TrackIdentifier(result.display_id)
        except InvalidTrackIdentifierError as e:
            logger.error(f"Song {result.title} has an unusable display ID: {e}")
            outcome.record_failure(identifier, FailureReason.INVALID_DISPLAY_ID, str(e))
            return

        if display_id != identifier:
            logger.warning(f"Lookup for {identifier} answered for {display_id}")

        file_path = display_id.path_in(base_dir, self.extension)
        logger.debug(f"Trying to open file at path {file_path}")

        try:
            record = self.tag_store.read_or_empty(file_path)
        except TagReadError as e:
            logger.error(str(e))
            outcome.record_failure(identifier, FailureReason.TAG_READ_FAILED, str(e))
            return

        logger.debug(f"Current title: {record.title}")

        try:
            count = merge_lookup_result(record, result, display_id.value)
        except ValueError as e:
            logger.error(f"Failed to parse timestamp for upload of {display_id}: {e}")
            outcome.record_failure(identifier, FailureReason.INVALID_UPLOAD_DATE, str(e))
            return

        logger.info(f"Saving data to file {file_path}")
        try:
            self.tag_store.write(file_path, record)
        except TagWriteError as e:
            logger.warning(str(e))
            outcome.record_failure(identifier, FailureReason.TAG_WRITE_FAILED, str(e))
            return

        logger.debug(f"{count}/{MERGEABLE_FIELDS} tags successfully written to {file_path}")
        outcome.record_written(identifier)


def _coerce_identifiers(identifiers: Iterable[Union[TrackIdentifier, str]]) -> List[TrackIdentifier]:
    return [
        identifier if isinstance(identifier, TrackIdentifier) else TrackIdentifier(str(identifier))
        for identifier in identifiers
    ]


def ingest(
    base_dir: Path,
    identifiers: Iterable[Union[TrackIdentifier, str]],
    concurrency_limit: int,
    lookup_client: Optional[LookupClient] = None,
    tag_store: Optional[TagStore] = None,
    extension: str = "mp3",
) -> RunOutcome:
    """
    Look up and tag every identifier in base_dir.

    Args:
        base_dir: Directory holding the audio files
        identifiers: Identifiers to process
        concurrency_limit: Maximum number of lookups in flight
        lookup_client: Optional LookupClient (default settings otherwise)
        tag_store: Optional TagStore (ID3v2.4 otherwise)
        extension: Audio file extension without the dot

    Returns:
        RunOutcome with per-item results
    """
    pipeline = IngestPipeline(lookup_client=lookup_client, tag_store=tag_store, extension=extension)
    return pipeline.run(base_dir, identifiers, concurrency_limit)
