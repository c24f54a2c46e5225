"""Generated-media download and local playable handles.

A MediaHandle is a temp file holding one scene's video bytes. It is owned
by its scene and must be released when the batch is discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import httpx

from .config import get_config
from .errors import DownloadError, EmptyMediaError
from .models.scene import new_id

logger = logging.getLogger(__name__)


def with_api_key(locator: str, api_key: str) -> str:
    """Append ``key=<api_key>`` to *locator*, respecting an existing query string."""
    separator = "&" if "?" in locator else "?"
    return f"{locator}{separator}key={api_key}"


async def download_media(
    locator: str,
    api_key: str,
    *,
    client: httpx.AsyncClient | None = None,
) -> bytes:
    """GET the media behind *locator* and return its bytes.

    Args:
        locator: Remote video URI returned by the generator.
        api_key: Gemini API key appended as the ``key`` query parameter.
        client: Optional client to reuse (tests inject a mock transport).

    Raises:
        DownloadError: On a non-2xx response.
        EmptyMediaError: When the body is empty.
        httpx.TransportError: Connection failures propagate unchanged.
    """
    url = with_api_key(locator, api_key)
    if client is None:
        timeout = get_config().download_timeout_seconds
        async with httpx.AsyncClient(follow_redirects=True, timeout=timeout) as owned:
            resp = await owned.get(url)
    else:
        resp = await client.get(url)

    if not resp.is_success:
        reason = resp.reason_phrase or f"HTTP {resp.status_code}"
        raise DownloadError(f"Failed to download: {reason}")
    data = resp.content
    if not data:
        raise EmptyMediaError("Empty video file")
    logger.debug("Downloaded %d bytes from %s", len(data), locator)
    return data


@dataclass
class MediaHandle:
    """Local playable reference to downloaded video bytes."""

    path: Path
    size_bytes: int
    mime_type: str = "video/mp4"
    released: bool = False

    def release(self) -> None:
        """Delete the backing file. Safe to call more than once."""
        if self.released:
            return
        self.released = True
        try:
            self.path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove media file %s", self.path, exc_info=True)


class MediaStore:
    """Materialises downloaded bytes into files under one directory."""

    def __init__(self, root: Path | None = None) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root or get_config().resolved_media_dir

    def materialize(self, data: bytes, scene_id: str) -> MediaHandle:
        """Write *data* to a new file and return a handle that owns it."""
        if not data:
            raise EmptyMediaError("Empty video file")
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / f"{scene_id}-{new_id()}.mp4"
        path.write_bytes(data)
        logger.debug("Materialised %d bytes at %s", len(data), path)
        return MediaHandle(path=path, size_bytes=len(data))
