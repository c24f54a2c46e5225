"""In-memory scene and batch records.

A Batch is created atomically from one parsed input. Its scenes are never
added or removed; only their status fields change, through the transition
methods below, and only the queue scheduler calls those.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

from ..errors import InvalidTransitionError
from .dream import SceneView

if TYPE_CHECKING:
    from ..media import MediaHandle


class SceneStatus(str, Enum):
    """Scene lifecycle states."""

    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({SceneStatus.COMPLETED, SceneStatus.FAILED})

_IMMUTABLE_FIELDS = frozenset({"id", "theme", "detail", "prompt"})


def new_id() -> str:
    """Return a 12-char hex identifier."""
    return uuid.uuid4().hex[:12]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Scene:
    """One requested video and its generation state."""

    theme: str
    detail: str
    prompt: str
    id: str = field(default_factory=new_id)
    status: SceneStatus = SceneStatus.PENDING
    remote_locator: str | None = None
    local_media: MediaHandle | None = None
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def __setattr__(self, name: str, value: object) -> None:
        if name in _IMMUTABLE_FIELDS and name in self.__dict__:
            raise AttributeError(f"Scene.{name} is immutable; create a new Scene instead")
        object.__setattr__(self, name, value)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def _require(self, expected: SceneStatus, target: SceneStatus) -> None:
        if self.status != expected:
            raise InvalidTransitionError(
                f"Scene {self.id}: cannot move from {self.status.value} to {target.value}"
            )

    def mark_generating(self) -> None:
        """pending → generating."""
        self._require(SceneStatus.PENDING, SceneStatus.GENERATING)
        self.status = SceneStatus.GENERATING
        self.started_at = _now()

    def mark_completed(self, remote_locator: str, local_media: MediaHandle) -> None:
        """generating → completed, attaching the remote locator and local handle."""
        self._require(SceneStatus.GENERATING, SceneStatus.COMPLETED)
        self.remote_locator = remote_locator
        self.local_media = local_media
        self.status = SceneStatus.COMPLETED
        self.completed_at = _now()

    def mark_failed(self, error: str) -> None:
        """generating → failed with a human-readable message."""
        self._require(SceneStatus.GENERATING, SceneStatus.FAILED)
        self.error = error or "Failed"
        self.status = SceneStatus.FAILED
        self.completed_at = _now()

    def release_media(self) -> bool:
        """Release the local media handle, if any. Returns True when one was released."""
        if self.local_media is None or self.local_media.released:
            return False
        self.local_media.release()
        return True

    def to_view(self, *, include_prompt: bool = False) -> SceneView:
        """Serialisable snapshot for tool responses."""
        media = self.local_media
        return SceneView(
            id=self.id,
            detail=self.detail,
            status=self.status.value,
            remote_locator=self.remote_locator or "",
            local_path=str(media.path) if media is not None and not media.released else "",
            error=self.error or "",
            prompt=self.prompt if include_prompt else "",
        )


@dataclass
class Batch:
    """Ordered, fixed set of scenes created from one dream input."""

    theme: str
    scenes: tuple[Scene, ...]
    model: str
    batch_id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=_now)
    current: bool = True

    def __iter__(self) -> Iterator[Scene]:
        return iter(self.scenes)

    def __len__(self) -> int:
        return len(self.scenes)

    def counts(self) -> dict[str, int]:
        """Number of scenes in each status, plus the total."""
        result = {status.value: 0 for status in SceneStatus}
        for scene in self.scenes:
            result[scene.status.value] += 1
        result["total"] = len(self.scenes)
        return result

    def release(self) -> int:
        """Mark the batch superseded and release every media handle. Returns count released."""
        self.current = False
        return sum(1 for scene in self.scenes if scene.release_media())
