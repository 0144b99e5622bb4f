#!/usr/bin/env python3
"""
Find and assign metadata to Geometry Dash music files.

USAGE:
    python3 tag_songs.py [-p PATH] [-t THREADS] [-w] [-c CONFIG] [-v | -q]

SYNOPSIS:
    Scans PATH for songs named <id>.mp3, looks each untitled one up on
    Newgrounds and writes title, artist, release date and links into its
    ID3 tag. With -w, wipes the tags of every song instead.

COMMAND LINE ARGUMENTS:
    -p PATH       Folder holding the songs (default: ./)
    -t THREADS    Number of concurrent lookups (default: 4)
    -w            Wipe metadata of all songs. Takes priority over other flags.
    -c CONFIG     Optional gdmeta YAML configuration file
"""

import argparse
import logging
import sys
from typing import List, Optional

from gdmeta.classifier import ClassifyMode, FileClassifier
from gdmeta.config import GDMetaConfig, load_config
from gdmeta.exceptions import ClassificationError, ConfigError, RunAbortedError
from gdmeta.ingest import IngestPipeline
from gdmeta.lookup_client import LookupClient
from gdmeta.models import RunOutcome
from gdmeta.tag_store import TagStore
from gdmeta.wipe import WipePipeline

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging for the run."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    logging.getLogger().setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="tag_songs.py",
        description="Find and assign metadata to Geometry Dash music files.",
    )
    parser.add_argument(
        "-p",
        "--path",
        default="./",
        help="Path to the GD music folder (default: ./)",
    )
    parser.add_argument(
        "-t",
        "--threads",
        type=int,
        default=None,
        help="Number of concurrent requests to make (default: 4)",
    )
    parser.add_argument(
        "-w",
        "--wipe",
        action="store_true",
        help="Wipe metadata of all songs. Takes priority over all other flags.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to a YAML configuration file.",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    verbosity.add_argument("--log-level", default=None, help="Explicit log level (e.g. INFO)")
    return parser


def resolve_log_level(args: argparse.Namespace, config: GDMetaConfig) -> str:
    """Pick the log level from flags, falling back to the config file."""
    if args.verbose:
        return "DEBUG"
    if args.quiet:
        return "WARNING"
    if args.log_level:
        return args.log_level
    return config.tagger.log_level


def print_summary(outcome: RunOutcome, title: str) -> None:
    """Print run summary."""
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)
    print(f"Written: {outcome.written}")
    print(f"Skipped: {outcome.skipped} ({outcome.not_found} not found)")
    print(f"Failed:  {outcome.failed}")

    if outcome.skips or outcome.failures:
        print("-" * 80)
        for skip in outcome.skips:
            print(f"  {skip.identifier}: {skip.reason.value}")
        for failure in outcome.failures:
            print(f"  {failure.identifier}: {failure.reason.value}")
    print("=" * 80)


def run(args: argparse.Namespace, config: GDMetaConfig) -> RunOutcome:
    """
    Classify the folder and run the selected pipeline.

    Args:
        args: Parsed command line arguments
        config: Loaded configuration

    Returns:
        RunOutcome of the pipeline
    """
    settings = config.tagger
    threads = args.threads if args.threads is not None else settings.threads
    if threads < 1:
        raise ConfigError(f"Thread count must be at least 1, got {threads}")

    tag_store = TagStore(v2_version=settings.id3_version)
    classifier = FileClassifier(tag_store=tag_store, extension=settings.extension)

    if args.wipe:
        logger.debug("Starting wipe")
        identifiers = classifier.classify(args.path, ClassifyMode.ALL)
        return WipePipeline(tag_store=tag_store, extension=settings.extension).run(
            args.path, identifiers
        )

    logger.debug(f"Starting adding metadata w/ base path {args.path} and {threads} requests")
    identifiers = classifier.classify(args.path, ClassifyMode.NON_TITLE)
    logger.debug(f"Found file IDs: {[str(identifier) for identifier in identifiers]}")

    lookup_client = LookupClient(
        url_template=settings.url_template,
        socket_timeout=settings.socket_timeout,
    )
    pipeline = IngestPipeline(
        lookup_client=lookup_client,
        tag_store=tag_store,
        extension=settings.extension,
    )
    return pipeline.run(args.path, identifiers, threads)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config) if args.config else GDMetaConfig()
    except ConfigError as e:
        setup_logging("INFO")
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    setup_logging(resolve_log_level(args, config))
    title = "WIPE SUMMARY" if args.wipe else "METADATA SUMMARY"

    try:
        outcome = run(args, config)
    except (ConfigError, ClassificationError) as e:
        logger.error(str(e))
        sys.exit(1)
    except RunAbortedError as e:
        logger.error(f"Run aborted: {e}")
        if e.outcome is not None:
            print_summary(e.outcome, title + " (ABORTED)")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(130)

    print_summary(outcome, title)


if __name__ == "__main__":
    main()
