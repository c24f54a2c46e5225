"""Tests for the dream tools."""

from __future__ import annotations

import pytest

from dream_sequence_mcp.errors import GenerationError
from dream_sequence_mcp.media import MediaStore
from dream_sequence_mcp.scheduler import QueueScheduler
from dream_sequence_mcp.session import DreamSession
from dream_sequence_mcp.tools.dream import (
    dream_playback,
    dream_reset,
    dream_resume,
    dream_status,
    dream_submit,
)
from tests.conftest import FakeCredentials, FakeDownloader, FakeVeo, unwrap_tool


@pytest.fixture()
def veo():
    return FakeVeo()


@pytest.fixture()
def session(tmp_path, veo, monkeypatch):
    """Swap the module-level session for one wired to fakes."""
    scheduler = QueueScheduler(
        generator=veo,
        downloader=FakeDownloader(),
        media_store=MediaStore(tmp_path / "media"),
        credentials=FakeCredentials(),
    )
    session = DreamSession(scheduler=scheduler)
    monkeypatch.setattr("dream_sequence_mcp.tools.dream.dream_session", session)
    return session


class TestDreamSubmit:
    async def test_returns_status_for_new_batch(self, session):
        result = await unwrap_tool(dream_submit)("What is joy? ; A field of sunflowers ; A child laughing")
        assert result["theme"] == "What is joy?"
        assert result["total"] == 2
        assert result["model"] == "veo-3.1-generate-preview"
        assert [s["detail"] for s in result["scenes"]] == ["A field of sunflowers", "A child laughing"]
        await session.wait()

    async def test_bad_input_returns_tool_error(self, session):
        result = await unwrap_tool(dream_submit)("just one part")
        assert result["category"] == "INPUT_INVALID"
        assert "semi-colons" in result["error"]
        assert result["retryable"] is False

    async def test_blank_input_returns_tool_error(self, session):
        result = await unwrap_tool(dream_submit)("   ")
        assert result["error"] == "Please describe your dream first."

    async def test_model_override(self, session, veo):
        await unwrap_tool(dream_submit)("T ; S", model="veo-2.0-generate-001")
        await session.wait()
        assert veo.calls[0][2] == "veo-2.0-generate-001"

    async def test_unknown_model_is_invalid_argument(self, session):
        result = await unwrap_tool(dream_submit)("T ; S", model="sora-2")
        assert result["category"] == "API_INVALID_ARGUMENT"


class TestDreamStatus:
    async def test_empty_before_submit(self, session):
        result = await unwrap_tool(dream_status)()
        assert result["total"] == 0
        assert result["scenes"] == []

    async def test_reports_failures(self, session, veo):
        veo.outcomes = {"bad": GenerationError("Prompt rejected")}
        await unwrap_tool(dream_submit)("T ; good ; bad")
        await session.wait()

        result = await unwrap_tool(dream_status)(include_prompts=True)

        assert result["completed"] == 1
        assert result["failed"] == 1
        assert result["is_processing"] is False
        bad = result["scenes"][1]
        assert bad["status"] == "failed"
        assert bad["error"] == "Prompt rejected"
        assert bad["prompt"]


class TestDreamResumeAndReset:
    async def test_resume_without_batch(self, session):
        result = await unwrap_tool(dream_resume)()
        assert result["total"] == 0

    async def test_reset_reports_released_count(self, session):
        await unwrap_tool(dream_submit)("T ; a ; b")
        await session.wait()
        result = await unwrap_tool(dream_reset)()
        assert result == {"released": 2}
        status = await unwrap_tool(dream_status)()
        assert status["total"] == 0


class TestDreamPlayback:
    async def test_nothing_to_play(self, session):
        result = await unwrap_tool(dream_playback)()
        assert result["total"] == 0
        assert result["label"] == ""

    async def test_next_wraps(self, session):
        await unwrap_tool(dream_submit)("What is joy? ; A field of sunflowers ; A child laughing")
        await session.wait()
        play = unwrap_tool(dream_playback)

        first = await play()
        assert first["label"] == "SCENE 1: A field of sunflowers"
        assert first["total"] == 2

        second = await play(action="next")
        assert second["index"] == 1
        assert second["label"] == "SCENE 2: A child laughing"

        wrapped = await play(action="ended")
        assert wrapped["index"] == 0

        back = await play(action="previous")
        assert back["index"] == 1

    async def test_toggle(self, session):
        play = unwrap_tool(dream_playback)
        assert (await play(action="toggle"))["playing"] is True
        assert (await play(action="toggle"))["playing"] is False
