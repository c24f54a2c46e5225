"""Dream tools — submit, status, resume, reset, and playback on a FastMCP sub-server."""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..errors import make_tool_error
from ..session import dream_session
from ..tracing import trace
from ..types import DreamInput, PlaybackAction, PromptTemplate, VeoModel

logger = logging.getLogger(__name__)
dream_server = FastMCP("dream")


@dream_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="dream_submit", span_type="TOOL")
async def dream_submit(
    text: DreamInput,
    model: Annotated[VeoModel | None, Field(description="Veo model override for this dream")] = None,
    prompt_template: Annotated[PromptTemplate | None, Field(
        description="Template override for this dream (defaults to the configured template)",
    )] = None,
) -> dict:
    """Turn a theme and scene list into videos, replacing the current dream.

    Scenes are generated in the background, two at a time. Poll
    ``dream_status`` for progress and use ``dream_playback`` to watch.

    Args:
        text: ``Theme ; Scene 1 ; Scene 2 ; ...``
        model: Veo model identifier.
        prompt_template: Template with {QUESTION}/{ANSWER} placeholders.

    Returns:
        DreamStatus dict for the new batch, or a ToolError dict.
    """
    try:
        await dream_session.submit(text, model=model, template=prompt_template)
    except Exception as exc:
        return make_tool_error(exc)
    return dream_session.status().model_dump(mode="json")


@dream_server.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=False))
async def dream_status(
    include_prompts: Annotated[bool, Field(description="Include each scene's rendered prompt")] = False,
) -> dict:
    """Report per-scene progress for the current dream.

    Returns:
        DreamStatus dict: counts per status, processing flag, and scene views.
    """
    return dream_session.status(include_prompts=include_prompts).model_dump(mode="json")


@dream_server.tool(annotations=ToolAnnotations(readOnlyHint=False, idempotentHint=True, openWorldHint=True))
async def dream_resume() -> dict:
    """Restart the queue for scenes of the current dream that are still pending.

    Completed and failed scenes are left as they are; to retry failed
    scenes, submit the dream again.
    """
    try:
        await dream_session.resume()
    except Exception as exc:
        return make_tool_error(exc)
    return dream_session.status().model_dump(mode="json")


@dream_server.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True, openWorldHint=False))
async def dream_reset() -> dict:
    """Discard the current dream, cancelling generation and releasing local videos.

    Returns:
        Dict with the number of media files released.
    """
    released = await dream_session.reset()
    return {"released": released}


@dream_server.tool(annotations=ToolAnnotations(readOnlyHint=False, idempotentHint=False, openWorldHint=False))
async def dream_playback(
    action: Annotated[PlaybackAction, Field(description="Playback control")] = "current",
) -> dict:
    """Drive the looping player over completed scenes.

    Args:
        action: "current", "next", "previous", "ended" (auto-advance), or "toggle".

    Returns:
        PlaybackState dict; ``total`` is 0 while nothing has completed.
    """
    feed = dream_session.playback
    if action == "next":
        feed.next()
    elif action == "previous":
        feed.previous()
    elif action == "ended":
        feed.ended()
    elif action == "toggle":
        feed.toggle()
    return feed.describe().model_dump(mode="json")
