"""Dream input parsing and batch creation.

Input format: ``Theme ; Scene 1 ; Scene 2 ; ...``. The first segment is
the shared theme, every following segment becomes one scene.
"""

from __future__ import annotations

import logging

from .errors import InputError
from .models.scene import Batch, Scene
from .prompts.dream import DEFAULT_PROMPT_TEMPLATE, build_prompt

logger = logging.getLogger(__name__)

SEPARATOR = ";"
SAMPLE_INPUT = (
    "What does the future look like? ; Flying cars in neon skies ; "
    "Robots gardening ; A city made of crystal"
)


def parse_dream_input(text: str) -> tuple[str, list[str]]:
    """Split dream input into (theme, scene details).

    Raises:
        InputError: When the text is blank or has fewer than two segments.
    """
    if not text or not text.strip():
        raise InputError("Please describe your dream first.")

    parts = [p.strip() for p in text.split(SEPARATOR)]
    parts = [p for p in parts if p]
    if len(parts) < 2:
        raise InputError(
            "Please format as: Theme ; Scene 1 ; Scene 2 "
            "(use semi-colons to separate each part)."
        )
    return parts[0], parts[1:]


def create_batch(
    text: str,
    *,
    model: str,
    template: str = DEFAULT_PROMPT_TEMPLATE,
) -> Batch:
    """Parse *text* and build a batch of pending scenes.

    Prompts are rendered here, once, from the template in effect now.
    """
    theme, details = parse_dream_input(text)
    scenes = tuple(
        Scene(theme=theme, detail=detail, prompt=build_prompt(theme, detail, template))
        for detail in details
    )
    batch = Batch(theme=theme, scenes=scenes, model=model)
    logger.info("Created batch %s with %d scene(s) for model %s", batch.batch_id, len(scenes), model)
    return batch
