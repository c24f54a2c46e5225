"""Bounded-concurrency scene queue.

Runs every pending scene of a batch through generate → download →
materialise, at most ``concurrency`` at a time, and records the outcome on
the scene. Per-scene failures never escape ``run``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable

from .client import resolve_api_key
from .config import get_config
from .credentials import CredentialProvider, credential_provider
from .errors import is_credential_error
from .media import MediaStore, download_media
from .models.scene import Batch, Scene, SceneStatus
from .veo import OutputConfig, generate_video

logger = logging.getLogger(__name__)

Generator = Callable[[str, OutputConfig, str], Awaitable[str]]
Downloader = Callable[[str, str], Awaitable[bytes]]
UpdateCallback = Callable[[Scene], None]

# Output shape used for every scene in a dream.
DREAM_OUTPUT = OutputConfig(resolution="1080p", aspect_ratio="16:9")


class QueueScheduler:
    """Drives scenes through Veo with a fixed concurrency ceiling.

    The scheduler is the only writer of scene status. The semaphore belongs
    to the instance, so overlapping ``run`` calls share the same ceiling.
    """

    def __init__(
        self,
        *,
        concurrency: int | None = None,
        generator: Generator = generate_video,
        downloader: Downloader = download_media,
        media_store: MediaStore | None = None,
        credentials: CredentialProvider | None = None,
        output: OutputConfig = DREAM_OUTPUT,
        on_update: UpdateCallback | None = None,
    ) -> None:
        self.concurrency = concurrency or get_config().concurrency_limit
        self._semaphore = asyncio.Semaphore(self.concurrency)
        self._generate = generator
        self._download = downloader
        self._media = media_store or MediaStore()
        self._credentials = credentials or credential_provider
        self._output = output
        self._on_update = on_update

    async def run(self, scenes: Batch | Iterable[Scene], model: str) -> None:
        """Process every pending scene; resolve once all admitted ones are terminal.

        Scenes already generating, completed, or failed are skipped, so
        calling ``run`` again only advances untouched work. When *scenes* is
        a Batch that gets discarded mid-run, late results are dropped instead
        of being written to the abandoned scenes.
        """
        if isinstance(scenes, Batch):
            batch: Batch | None = scenes
            candidates = list(scenes.scenes)
        else:
            batch = None
            candidates = list(scenes)

        pending = [s for s in candidates if s.status == SceneStatus.PENDING]
        if not pending:
            logger.debug("No pending scenes to process")
            return

        logger.info(
            "Processing %d pending scene(s) with model %s (concurrency=%d)",
            len(pending), model, self.concurrency,
        )

        def is_current() -> bool:
            return batch is None or batch.current

        await asyncio.gather(*(self._process(scene, model, is_current) for scene in pending))
        logger.info("Queue drained: %d scene(s) reached a terminal state", len(pending))

    async def _process(self, scene: Scene, model: str, is_current: Callable[[], bool]) -> None:
        async with self._semaphore:
            if not is_current() or scene.status != SceneStatus.PENDING:
                return
            scene.mark_generating()
            self._notify(scene)

            try:
                locator = await self._generate(scene.prompt, self._output, model)
                data = await self._download(locator, resolve_api_key())
                handle = self._media.materialize(data, scene.id)
            except Exception as exc:
                message = str(exc) or "Failed"
                logger.error("Error processing scene %s: %s", scene.id, message)
                if is_credential_error(message):
                    await self._reselect_credentials()
                if not is_current():
                    return
                scene.mark_failed(message)
                self._notify(scene)
                return

            if not is_current():
                handle.release()
                logger.info("Batch discarded while scene %s finished; media released", scene.id)
                return
            scene.mark_completed(locator, handle)
            self._notify(scene)
            logger.info("Scene %s completed (%d bytes)", scene.id, handle.size_bytes)

    async def _reselect_credentials(self) -> None:
        try:
            await self._credentials.open_selector()
        except Exception:
            logger.error("Failed to open credential selector", exc_info=True)

    def _notify(self, scene: Scene) -> None:
        if self._on_update is None:
            return
        try:
            self._on_update(scene)
        except Exception:
            logger.warning("Progress callback failed for scene %s", scene.id, exc_info=True)
