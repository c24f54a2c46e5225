"""Shared type aliases for tool parameters."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field

# ── Literal enums ────────────────────────────────────────────────────────────

VeoModel = Literal[
    "veo-3.1-generate-preview",
    "veo-3.1-fast-generate-preview",
    "veo-3.0-generate-001",
    "veo-3.0-fast-generate-001",
    "veo-2.0-generate-001",
]
PlaybackAction = Literal["current", "next", "previous", "ended", "toggle"]
CredentialAction = Literal["status", "reselect"]

# ── Annotated aliases ────────────────────────────────────────────────────────

DreamInput = Annotated[str, Field(
    description="Theme and scenes separated by semicolons, e.g. 'What is joy? ; A field of sunflowers ; A child laughing'",
)]
PromptTemplate = Annotated[str, Field(
    min_length=1,
    description="Prompt template; {QUESTION} is replaced by the theme and {ANSWER} by the scene",
)]
