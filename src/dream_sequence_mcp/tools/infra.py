"""Infrastructure tools — runtime configuration and credential handling."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..config import VEO_MODELS, get_config, update_config
from ..credentials import credential_provider
from ..errors import make_tool_error
from ..prompts.dream import DEFAULT_PROMPT_TEMPLATE
from ..tracing import trace
from ..types import CredentialAction, PromptTemplate, VeoModel

infra_server = FastMCP("infra")
_SENSITIVE_CONFIG_FIELDS = {"gemini_api_key"}


def _redacted_config() -> dict:
    """Return runtime config with secret-bearing fields removed."""
    return get_config().model_dump(exclude=_SENSITIVE_CONFIG_FIELDS)


@infra_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@trace(name="infra_configure", span_type="TOOL")
async def infra_configure(
    model: Annotated[VeoModel | None, Field(description="Default Veo model for new dreams")] = None,
    prompt_template: Annotated[PromptTemplate | None, Field(
        description="Default prompt template for new dreams",
    )] = None,
    reset_template: Annotated[bool, Field(description="Restore the built-in prompt template")] = False,
) -> dict:
    """Reconfigure the server at runtime — Veo model and prompt template.

    Changes apply to dreams submitted afterwards; scenes already created
    keep the prompt they were rendered with.

    Args:
        model: Veo model identifier.
        prompt_template: Template with {QUESTION}/{ANSWER} placeholders.
        reset_template: Restore the default template (wins over prompt_template).

    Returns:
        Dict with current_config and available_models.
    """
    try:
        overrides: dict[str, object] = {}
        if model is not None:
            overrides["veo_model"] = model
        if prompt_template is not None:
            overrides["prompt_template"] = prompt_template
        if reset_template:
            overrides["prompt_template"] = DEFAULT_PROMPT_TEMPLATE

        if overrides:
            update_config(**overrides)

        return {
            "current_config": _redacted_config(),
            "available_models": {k: v["label"] for k, v in VEO_MODELS.items()},
        }
    except Exception as exc:
        return make_tool_error(exc)


@infra_server.tool(annotations=ToolAnnotations(readOnlyHint=False, idempotentHint=True, openWorldHint=False))
async def infra_credentials(
    action: Annotated[CredentialAction, Field(description="'status' or 'reselect'")] = "status",
) -> dict:
    """Check for a Gemini API key, or reload it after editing the .env file.

    Returns:
        Dict with has_credential and the number of reselections performed.
    """
    try:
        if action == "reselect":
            await credential_provider.open_selector()
        return {
            "has_credential": credential_provider.has_credential(),
            "reselections": credential_provider.reselections,
        }
    except Exception as exc:
        return make_tool_error(exc)
