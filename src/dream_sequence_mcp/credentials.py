"""Credential collaborator — key presence check and reselection."""

from __future__ import annotations

import logging
from typing import Protocol

from .client import GeminiClient
from .config import get_config, refresh_api_key
from .dotenv import load_dotenv

logger = logging.getLogger(__name__)


class CredentialProvider(Protocol):
    """What the scheduler needs from whoever owns the API key."""

    def has_credential(self) -> bool: ...

    async def open_selector(self) -> None: ...


class EnvCredentialProvider:
    """API key sourced from ``GEMINI_API_KEY`` and the shared .env file.

    Reselection re-reads the .env file (overriding the process value),
    refreshes the key on the live config (runtime model and template
    overrides are kept), and drops cached clients so the next request uses
    the new key.
    """

    def __init__(self) -> None:
        self.reselections = 0

    def has_credential(self) -> bool:
        return bool(get_config().gemini_api_key)

    async def open_selector(self) -> None:
        self.reselections += 1
        logger.warning(
            "Gemini API key was rejected — update GEMINI_API_KEY in "
            "~/.config/dream-sequence-mcp/.env; reloading the key"
        )
        injected = load_dotenv(override=True)
        refresh_api_key()
        dropped = GeminiClient.forget_all()
        logger.info(
            "Credential reselection: %d var(s) reloaded, %d client(s) dropped, key present=%s",
            len(injected),
            dropped,
            self.has_credential(),
        )


# Process-wide provider used by the scheduler and the infra tools.
credential_provider = EnvCredentialProvider()
