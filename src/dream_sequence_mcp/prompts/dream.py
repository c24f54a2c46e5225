"""Prompt template for dream-sequence scenes.

Placeholders: {QUESTION} (the shared theme), {ANSWER} (the scene detail).
"""

from __future__ import annotations

THEME_PLACEHOLDER = "{QUESTION}"
DETAIL_PLACEHOLDER = "{ANSWER}"

DEFAULT_PROMPT_TEMPLATE = """\
(Cinematic visual style defined by: {QUESTION}): {ANSWER}.

CAMERA MOVEMENT: Continuous, slow-motion forward dolly (zoom in). The camera never stops moving forward.

START STATE: The video begins by emerging from a macro, extreme close-up of a neutral texture (mist/fog/blur) that matches the aesthetic of {QUESTION}.

MIDDLE STATE: As the camera moves forward, the scene reveals the representation of {ANSWER} in the center of the frame. The environment is immersive and fully detailed.

END STATE: The camera continues moving forward, eventually pushing extremely close into a texture within the scene until the screen is filled with a macro blur/mist, obscuring the details and returning to a neutral state.

AUDIO: Purely ambient and atmospheric soundscape. NO speech, NO dialogue, NO voices. Ethereal, abstract, deep textures that blend seamlessly.

TECHNICAL: 4k resolution, photorealistic, 10 seconds, temporal smoothing, consistent lighting."""


def build_prompt(theme: str, detail: str, template: str = DEFAULT_PROMPT_TEMPLATE) -> str:
    """Render *template* by substituting every theme and detail placeholder.

    Substitution is literal: a missing placeholder is simply a no-op.
    """
    return template.replace(THEME_PLACEHOLDER, theme).replace(DETAIL_PLACEHOLDER, detail)
