"""Dream session — the current batch, its background queue task, and playback.

Lifecycle: ``submit`` creates a batch (superseding and releasing any
previous one) and starts the queue in the background; ``reset`` cancels the
queue, releases every media handle, and clears the batch.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from .batch import create_batch
from .config import VEO_MODELS, get_config
from .models.dream import DreamStatus
from .models.scene import Batch, Scene
from .playback import PlaybackFeed
from .scheduler import QueueScheduler

logger = logging.getLogger(__name__)


class DreamSession:
    """Owns the live batch, the task running its queue, and the playback cursor."""

    def __init__(self, scheduler: QueueScheduler | None = None) -> None:
        self._scheduler = scheduler
        self._batch: Batch | None = None
        self._task: asyncio.Task | None = None
        # Keep references so running tasks are not garbage-collected.
        self._background: set[asyncio.Task] = set()
        self.playback = PlaybackFeed(self.scenes)

    @property
    def scheduler(self) -> QueueScheduler:
        if self._scheduler is None:
            self._scheduler = QueueScheduler()
        return self._scheduler

    @property
    def batch(self) -> Batch | None:
        return self._batch

    @property
    def is_processing(self) -> bool:
        return self._task is not None and not self._task.done()

    def scenes(self) -> tuple[Scene, ...]:
        return self._batch.scenes if self._batch is not None else ()

    async def submit(
        self,
        text: str,
        *,
        model: str | None = None,
        template: str | None = None,
    ) -> Batch:
        """Parse *text* into a new batch and start generating it.

        Input errors are raised before the previous batch is touched.
        """
        cfg = get_config()
        resolved_model = model or cfg.veo_model
        if resolved_model not in VEO_MODELS:
            allowed = ", ".join(sorted(VEO_MODELS))
            raise ValueError(f"Unknown Veo model '{resolved_model}'. Allowed: {allowed}")

        batch = create_batch(
            text,
            model=resolved_model,
            template=template if template is not None else cfg.prompt_template,
        )
        await self._discard()
        self._batch = batch
        self.playback.reset()
        self._start(batch)
        return batch

    async def resume(self) -> Batch | None:
        """Re-run the queue on the current batch; only pending scenes are processed."""
        if self._batch is None or self.is_processing:
            return self._batch
        self._start(self._batch)
        return self._batch

    async def reset(self) -> int:
        """Cancel in-flight work and release the batch. Returns media handles released."""
        released = await self._discard()
        self.playback.reset()
        return released

    async def wait(self) -> None:
        """Wait for the background queue task, if any, to finish."""
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    def status(self, *, include_prompts: bool = False) -> DreamStatus:
        batch = self._batch
        if batch is None:
            return DreamStatus()
        counts = batch.counts()
        return DreamStatus(
            batch_id=batch.batch_id,
            theme=batch.theme,
            model=batch.model,
            is_processing=self.is_processing,
            total=counts["total"],
            pending=counts["pending"],
            generating=counts["generating"],
            completed=counts["completed"],
            failed=counts["failed"],
            scenes=[s.to_view(include_prompt=include_prompts) for s in batch.scenes],
        )

    def _start(self, batch: Batch) -> None:
        task = asyncio.create_task(self.scheduler.run(batch, batch.model))
        self._task = task
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _discard(self) -> int:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        batch, self._batch = self._batch, None
        if batch is None:
            return 0
        released = batch.release()
        logger.info("Discarded batch %s (%d media handle(s) released)", batch.batch_id, released)
        return released


# Module-level singleton
dream_session = DreamSession()
