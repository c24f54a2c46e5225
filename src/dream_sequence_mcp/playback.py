"""Looping playback over the completed scenes of the live batch."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from .models.dream import PlaybackState
from .models.scene import Scene, SceneStatus

SceneSource = Callable[[], Sequence[Scene]]


class PlaybackFeed:
    """Cursor over completed scenes, in batch order, wrapping at both ends.

    The completed subset grows while the queue runs (and empties on reset),
    so every access re-reads *source* and re-clamps the cursor.
    """

    def __init__(self, source: SceneSource) -> None:
        self._source = source
        self._index = 0
        self.playing = False

    def playable(self) -> list[Scene]:
        """Completed scenes whose media handle is still live."""
        return [
            s for s in self._source()
            if s.status == SceneStatus.COMPLETED
            and s.local_media is not None
            and not s.local_media.released
        ]

    def _clamp(self, items: list[Scene]) -> list[Scene]:
        if self._index >= len(items):
            self._index = 0
        return items

    @property
    def index(self) -> int:
        self._clamp(self.playable())
        return self._index

    def current(self) -> Scene | None:
        items = self._clamp(self.playable())
        return items[self._index] if items else None

    def next(self) -> Scene | None:
        """Advance one item, wrapping to the first after the last."""
        items = self._clamp(self.playable())
        if not items:
            return None
        self._index = (self._index + 1) % len(items)
        return items[self._index]

    def previous(self) -> Scene | None:
        """Step back one item, wrapping to the last before the first."""
        items = self._clamp(self.playable())
        if not items:
            return None
        self._index = (self._index - 1 + len(items)) % len(items)
        return items[self._index]

    def ended(self) -> Scene | None:
        """End-of-item signal from the host: auto-advance to the next item."""
        return self.next()

    def toggle(self) -> bool:
        """Flip play/pause and return the new state."""
        self.playing = not self.playing
        return self.playing

    def reset(self) -> None:
        self._index = 0
        self.playing = False

    def describe(self) -> PlaybackState:
        items = self._clamp(self.playable())
        if not items:
            return PlaybackState(playing=self.playing)
        scene = items[self._index]
        return PlaybackState(
            index=self._index,
            total=len(items),
            playing=self.playing,
            label=f"SCENE {self._index + 1}: {scene.detail}",
            scene_id=scene.id,
            local_path=str(scene.local_media.path) if scene.local_media else "",
        )
