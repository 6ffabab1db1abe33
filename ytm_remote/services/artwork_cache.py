"""On-disk artwork cache for track thumbnails."""

import hashlib
import logging
from pathlib import Path

import httpx

from ytm_remote.exceptions import ArtworkException, ConfigurationException
from ytm_remote.logging_config import get_logger, log_with_context

ARTWORK_SUFFIX = ".jpg"


class ArtworkCache:
    """Fetch-or-reuse cache of artwork files.

    Files are named after the track id, so each track is downloaded at most
    once. Tracks without an id fall back to a hash of the artwork URL.
    """

    def __init__(self, cache_dir: Path, client: httpx.AsyncClient, logger: logging.Logger | None = None):
        """Initialize the cache and create its directory.

        Args:
            cache_dir: Directory holding cached files
            client: Shared HTTP client used for downloads
            logger: Logger (defaults to the module logger)

        Raises:
            ConfigurationException: If the directory cannot be created
        """
        self._cache_dir = cache_dir
        self._client = client
        self._logger = logger or get_logger(__name__)

        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationException(
                f"Cannot create artwork cache directory: {e}",
                details={"cache_dir": str(cache_dir)},
            ) from e

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def path_for(self, track_id: str, artwork_url: str) -> Path | None:
        """Cache file path for a track, or None if there is nothing to key on."""
        if track_id:
            key = track_id
        elif artwork_url:
            key = hashlib.sha1(artwork_url.encode("utf-8")).hexdigest()
        else:
            return None
        # Track ids are opaque; keep them from escaping the cache directory
        safe_key = "".join(c if c.isalnum() or c in "-_" else "_" for c in key)
        return self._cache_dir / f"{safe_key}{ARTWORK_SUFFIX}"

    async def fetch(self, track_id: str, artwork_url: str) -> Path | None:
        """Return a local artwork file, downloading it on first use.

        Args:
            track_id: Stable id of the track
            artwork_url: Remote artwork URL

        Returns:
            Path of the cached file, or None if the artwork is unavailable
        """
        path = self.path_for(track_id, artwork_url)
        if path is None:
            return None

        if path.exists():
            log_with_context(
                self._logger,
                "debug",
                "Artwork cache hit",
                track_id=track_id,
                event_type="artwork_cache_hit",
            )
            return path

        if not artwork_url:
            return None

        try:
            await self._download(artwork_url, path)
        except ArtworkException as e:
            log_with_context(
                self._logger,
                "warning",
                "Artwork download failed",
                track_id=track_id,
                url=artwork_url,
                error=e.message,
                event_type="artwork_download_failed",
            )
            return None

        log_with_context(
            self._logger,
            "debug",
            "Artwork cached",
            track_id=track_id,
            path=str(path),
            event_type="artwork_cached",
        )
        return path

    async def _download(self, url: str, path: Path) -> None:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ArtworkException(f"Artwork request failed: {e}", details={"url": url}) from e

        partial = path.with_suffix(path.suffix + ".part")
        try:
            partial.write_bytes(response.content)
            partial.replace(path)
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise ArtworkException(f"Cannot write artwork: {e}", details={"path": str(path)}) from e
