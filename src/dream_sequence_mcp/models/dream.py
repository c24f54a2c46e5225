"""Output schemas for the dream tools.

These are returned directly by the tools as dicts; none of them is used
for structured model output.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SceneView(BaseModel):
    """Snapshot of one scene for progress display."""

    id: str
    detail: str
    status: str
    remote_locator: str = ""
    local_path: str = ""
    error: str = ""
    prompt: str = ""


class DreamStatus(BaseModel):
    """Output schema for dream_submit, dream_status, and dream_resume."""

    batch_id: str = ""
    theme: str = ""
    model: str = ""
    is_processing: bool = False
    total: int = 0
    pending: int = 0
    generating: int = 0
    completed: int = 0
    failed: int = 0
    scenes: list[SceneView] = Field(default_factory=list)


class PlaybackState(BaseModel):
    """Output schema for dream_playback."""

    index: int = 0
    total: int = 0
    playing: bool = False
    label: str = ""
    scene_id: str = ""
    local_path: str = ""
