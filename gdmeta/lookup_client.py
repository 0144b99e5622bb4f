"""
Remote metadata lookup using yt-dlp.
"""

import logging
from typing import Any, Dict, Optional

import yt_dlp

from gdmeta.exceptions import (
    LookupExitError,
    LookupPayloadError,
    LookupTimeoutError,
    LookupTransportError,
)
from gdmeta.models import LookupResponse, LookupResult, PlaylistResult, TrackIdentifier

logger = logging.getLogger(__name__)

DEFAULT_URL_TEMPLATE = "https://www.newgrounds.com/audio/listen/{id}"
LOOKUP_TIMEOUT_SECONDS = 15

# yt-dlp exits with 1 on any extraction error
EXIT_FAILURE_CODE = 1


class LookupClient:
    """Fetches track metadata for one identifier at a time with yt-dlp."""

    def __init__(
        self,
        url_template: str = DEFAULT_URL_TEMPLATE,
        socket_timeout: int = LOOKUP_TIMEOUT_SECONDS,
    ):
        """
        Initialize lookup client.

        Args:
            url_template: Page URL with an ``{id}`` placeholder for the identifier
            socket_timeout: Network timeout in seconds for each lookup
        """
        if "{id}" not in url_template:
            raise ValueError(f"URL template has no {{id}} placeholder: {url_template}")
        self.url_template = url_template
        self.socket_timeout = socket_timeout

        self.ytdl_opts = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "extract_flat": "in_playlist",
            "socket_timeout": socket_timeout,
            "logger": logging.getLogger("gdmeta.yt_dlp"),
        }

    def build_url(self, identifier: TrackIdentifier) -> str:
        """Page URL for an identifier."""
        return self.url_template.format(id=identifier)

    def lookup(self, identifier: TrackIdentifier) -> LookupResponse:
        """
        Look up metadata for an identifier without downloading audio.

        Args:
            identifier: Track identifier to look up

        Returns:
            LookupResult for a single track, PlaylistResult for multi-entry pages

        Raises:
            LookupExitError: If yt-dlp reported an error (HTTP errors included)
            LookupTimeoutError: If the lookup timed out
            LookupTransportError: If yt-dlp could not be run at all
            LookupPayloadError: If yt-dlp returned no usable info dictionary
        """
        url = self.build_url(identifier)
        logger.debug(f"Querying URL {url}")

        try:
            with yt_dlp.YoutubeDL(self.ytdl_opts) as ydl:
                info = ydl.extract_info(url, download=False)
        except yt_dlp.utils.DownloadError as e:
            if _is_timeout(e):
                raise LookupTimeoutError(f"Lookup for {identifier} timed out: {e}") from e
            raise LookupExitError(EXIT_FAILURE_CODE, str(e)) from e
        except TimeoutError as e:
            raise LookupTimeoutError(f"Lookup for {identifier} timed out: {e}") from e
        except OSError as e:
            raise LookupTransportError(f"IO error while looking up {url}: {e}") from e
        except Exception as e:
            raise LookupTransportError(f"Unexpected yt-dlp failure for {url}: {e}") from e

        return self._parse_info(url, info)

    def _parse_info(self, url: str, info: Optional[Dict[str, Any]]) -> LookupResponse:
        """Turn a yt-dlp info dictionary into a lookup response."""
        if not isinstance(info, dict):
            raise LookupPayloadError(
                f"Expected an info dictionary for {url}, got {type(info).__name__}"
            )

        if info.get("_type") in ("playlist", "multi_video") or "entries" in info:
            entries = info.get("entries") or []
            return PlaylistResult(title=info.get("title"), entry_count=len(list(entries)))

        return LookupResult.from_info(info)


def _is_timeout(error: Exception) -> bool:
    """Check whether a yt-dlp error was caused by a network timeout."""
    exc_info = getattr(error, "exc_info", None)
    if exc_info and isinstance(exc_info[1], TimeoutError):
        return True
    return "timed out" in str(error).lower()
