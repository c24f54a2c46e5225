"""Shared Gemini client pool used by the Veo generator."""

from __future__ import annotations

import logging
import os

from google import genai

from .config import get_config

logger = logging.getLogger(__name__)


def resolve_api_key(api_key: str | None = None) -> str:
    """Return the API key to use, preferring an explicit value over config/env.

    Raises:
        ValueError: If no key is available.
    """
    key = api_key or get_config().gemini_api_key or os.getenv("GEMINI_API_KEY", "")
    if not key:
        raise ValueError("No Gemini API key — set GEMINI_API_KEY or pass api_key explicitly")
    return key


class GeminiClient:
    """Process-wide Gemini client pool (one client per API key)."""

    _clients: dict[str, genai.Client] = {}

    @classmethod
    def get(cls, api_key: str | None = None) -> genai.Client:
        """Return (or create) the shared client for *api_key*."""
        key = resolve_api_key(api_key)
        if key not in cls._clients:
            cls._clients[key] = genai.Client(api_key=key)
            logger.info("Created Gemini client (key …%s)", key[-4:])
        return cls._clients[key]

    @classmethod
    def forget_all(cls) -> int:
        """Drop pooled clients without closing them; in-flight calls keep their client."""
        count = len(cls._clients)
        cls._clients.clear()
        return count

    @classmethod
    async def close_all(cls) -> int:
        """Shut down all shared clients. Returns count closed."""
        count = 0
        for key, client in list(cls._clients.items()):
            try:
                await client.aio.aclose()
            except Exception:
                logger.debug("Async close failed for client …%s", key[-4:], exc_info=True)
            try:
                client.close()
            except Exception:
                logger.debug("Sync close failed for client …%s", key[-4:], exc_info=True)
            count += 1
        cls._clients.clear()
        logger.info("Closed %d Gemini client(s)", count)
        return count
