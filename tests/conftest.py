"""Shared test fixtures for dream-sequence-mcp."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from dream_sequence_mcp.models.scene import Scene


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @server.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True)
def _set_dummy_api_key(monkeypatch):
    """Ensure tests never hit the real Gemini API."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key-not-real")


@pytest.fixture(autouse=True)
def _disable_tracing(monkeypatch):
    """Disable MLflow tracing in all tests."""
    monkeypatch.setenv("GEMINI_TRACING_ENABLED", "false")


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/dream-sequence-mcp/.env."""
    monkeypatch.setattr(
        "dream_sequence_mcp.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture(autouse=True)
def _isolate_media_dir(tmp_path, monkeypatch):
    """Point the media directory at a temp dir so tests never share files."""
    media_dir = tmp_path / "media"
    monkeypatch.setenv("DREAM_MEDIA_DIR", str(media_dir))
    return media_dir


@pytest.fixture(autouse=True)
def clean_config():
    """Reset the config singleton so each test reads its own environment."""
    import dream_sequence_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture(autouse=True)
def _clean_client_pool():
    """Keep pooled Gemini clients from leaking between tests."""
    from dream_sequence_mcp.client import GeminiClient

    GeminiClient._clients.clear()
    yield
    GeminiClient._clients.clear()


@pytest.fixture(autouse=True)
def _reset_credential_provider(monkeypatch):
    """Start every test with a zero reselection count on the shared provider."""
    from dream_sequence_mcp.credentials import credential_provider

    monkeypatch.setattr(credential_provider, "reselections", 0)


@pytest.fixture()
def mock_genai_client():
    """Patch GeminiClient.get() to return a MagicMock client."""
    with patch("dream_sequence_mcp.veo.GeminiClient.get") as mock_get:
        client = MagicMock()
        mock_get.return_value = client
        yield client


@pytest.fixture()
def media_dir(_isolate_media_dir):
    return _isolate_media_dir


def make_scene(detail: str = "A field of sunflowers", theme: str = "What is joy?") -> Scene:
    """Build a pending scene with a trivial prompt."""
    return Scene(theme=theme, detail=detail, prompt=f"{theme} | {detail}")


@dataclass
class FakeCredentials:
    """Credential collaborator that records selector calls."""

    present: bool = True
    opened: int = 0
    fail_on_open: bool = False

    def has_credential(self) -> bool:
        return self.present

    async def open_selector(self) -> None:
        self.opened += 1
        if self.fail_on_open:
            raise RuntimeError("selector unavailable")


@dataclass
class FakeVeo:
    """Stand-in generator: per-prompt outcomes plus concurrency tracking.

    ``outcomes`` maps a prompt substring to either a locator string or an
    exception to raise. Prompts without a match get ``https://veo/<n>``.
    """

    outcomes: dict[str, Any] = field(default_factory=dict)
    delay: float = 0.01
    active: int = 0
    peak: int = 0
    calls: list[tuple[str, Any, str]] = field(default_factory=list)

    async def __call__(self, prompt: str, output: Any, model: str) -> str:
        self.calls.append((prompt, output, model))
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
            for key, outcome in self.outcomes.items():
                if key in prompt:
                    if isinstance(outcome, Exception):
                        raise outcome
                    return outcome
            return f"https://veo/{len(self.calls)}"
        finally:
            self.active -= 1


@dataclass
class FakeDownloader:
    """Stand-in downloader returning fixed bytes, or raising for listed locators."""

    payload: bytes = b"\x00\x00\x00\x18ftypmp42"
    failures: dict[str, Exception] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def __call__(self, locator: str, api_key: str) -> bytes:
        self.calls.append((locator, api_key))
        if locator in self.failures:
            raise self.failures[locator]
        return self.payload
