"""Veo video generation via the Gemini API long-running operations.

``generate_video`` submits one prompt, polls the operation at a fixed
interval until it is done, and returns the URI of the first generated video.
It never touches scene state.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from time import monotonic

from google.genai import types

from .client import GeminiClient
from .config import VEO_MODELS, get_config
from .errors import GenerationError, GenerationTimeoutError, NoMediaError
from .retry import with_retry
from .tracing import tag_span, trace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputConfig:
    """Requested output shape for one generation."""

    resolution: str = "1080p"
    aspect_ratio: str = "16:9"


def supports_resolution(model: str) -> bool:
    """Whether *model* accepts the ``resolution`` parameter.

    Unknown identifiers are treated as not supporting it, so the request is
    accepted by every model family.
    """
    return bool(VEO_MODELS.get(model, {}).get("supports_resolution", False))


def build_generation_config(model: str, output: OutputConfig) -> types.GenerateVideosConfig:
    """Build the request config, adding ``resolution`` only where the model takes it."""
    config = types.GenerateVideosConfig(
        number_of_videos=1,
        aspect_ratio=output.aspect_ratio,
    )
    if supports_resolution(model):
        config.resolution = output.resolution
    return config


def _operation_error_message(error: object) -> str:
    """Extract a message from the operation's error payload (dict or object)."""
    if isinstance(error, dict):
        message = error.get("message")
    else:
        message = getattr(error, "message", None)
    return message or "Unknown generation error"


def _first_video_uri(operation: types.GenerateVideosOperation) -> str | None:
    response = operation.response
    videos = response.generated_videos if response is not None else None
    if not videos:
        return None
    video = videos[0].video
    return video.uri if video is not None else None


@trace(name="veo_generate_video", span_type="LLM")
async def generate_video(
    prompt: str,
    output: OutputConfig | None = None,
    model: str | None = None,
) -> str:
    """Generate one video for *prompt* and return its remote URI.

    Args:
        prompt: Fully rendered scene prompt.
        output: Resolution and aspect ratio (defaults from config).
        model: Veo model identifier (defaults to config's ``veo_model``).

    Returns:
        The remote locator (URI) of the first generated video.

    Raises:
        GenerationError: The operation finished with an error payload.
        NoMediaError: The operation finished without any video.
        GenerationTimeoutError: ``max_poll_seconds`` elapsed first.
        Exception: Submit/poll transport failures propagate unchanged.
    """
    cfg = get_config()
    resolved_model = model or cfg.veo_model
    if output is None:
        output = OutputConfig(resolution=cfg.resolution, aspect_ratio=cfg.aspect_ratio)
    config = build_generation_config(resolved_model, output)
    client = GeminiClient.get()

    logger.info("Submitting Veo generation (model=%s, aspect=%s)", resolved_model, output.aspect_ratio)
    logger.debug("Prompt: %s...", prompt[:100])
    operation = await with_retry(
        lambda: client.aio.models.generate_videos(
            model=resolved_model,
            prompt=prompt,
            config=config,
        ),
        label="submit",
    )

    started = monotonic()
    polls = 0
    while not operation.done:
        if cfg.max_poll_seconds and monotonic() - started > cfg.max_poll_seconds:
            raise GenerationTimeoutError(
                f"Video generation timed out after {cfg.max_poll_seconds:.0f}s"
            )
        await asyncio.sleep(cfg.poll_interval_seconds)
        polls += 1
        current = operation
        operation = await with_retry(
            lambda: client.aio.operations.get(current),
            label="poll",
        )
        logger.debug("Poll %d for %s: done=%s", polls, operation.name, operation.done)

    if operation.error:
        raise GenerationError(_operation_error_message(operation.error))

    uri = _first_video_uri(operation)
    if not uri:
        raise NoMediaError("No video URI returned from API")

    tag_span(model=resolved_model, polls=polls, operation=operation.name or "")
    logger.info("Veo generation finished after %d poll(s)", polls)
    return uri
