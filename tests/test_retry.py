"""Tests for transient-error retry around Veo calls."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from dream_sequence_mcp.retry import backoff_delay, is_transient, with_retry


class TestIsTransient:
    @pytest.mark.parametrize(
        "message",
        ["429 Too Many Requests", "RESOURCE_EXHAUSTED", "503 Service Unavailable", "read timeout"],
    )
    def test_transient(self, message):
        assert is_transient(RuntimeError(message))

    @pytest.mark.parametrize("message", ["400 INVALID_ARGUMENT", "Prompt rejected"])
    def test_not_transient(self, message):
        assert not is_transient(RuntimeError(message))

    def test_credential_error_never_transient(self):
        assert not is_transient(RuntimeError("503 ... Requested entity was not found"))


def test_backoff_delay_is_capped():
    assert backoff_delay(0, 1.0, 60.0) < 2.0
    assert backoff_delay(10, 1.0, 5.0) == 5.0


@patch("dream_sequence_mcp.retry.asyncio.sleep", new_callable=AsyncMock)
class TestWithRetry:
    async def test_returns_first_success(self, mock_sleep):
        call = AsyncMock(return_value="ok")
        assert await with_retry(call) == "ok"
        assert call.await_count == 1
        mock_sleep.assert_not_awaited()

    async def test_retries_transient_then_succeeds(self, mock_sleep):
        call = AsyncMock(side_effect=[RuntimeError("429 quota"), "ok"])
        assert await with_retry(call, label="submit") == "ok"
        assert call.await_count == 2
        assert mock_sleep.await_count == 1

    async def test_non_transient_raises_immediately(self, mock_sleep):
        call = AsyncMock(side_effect=RuntimeError("400 INVALID_ARGUMENT"))
        with pytest.raises(RuntimeError, match="400"):
            await with_retry(call)
        assert call.await_count == 1

    async def test_gives_up_after_max_attempts(self, mock_sleep, monkeypatch):
        monkeypatch.setenv("GEMINI_RETRY_MAX_ATTEMPTS", "2")
        call = AsyncMock(side_effect=RuntimeError("503 Service Unavailable"))
        with pytest.raises(RuntimeError, match="503"):
            await with_retry(call)
        assert call.await_count == 2
        assert mock_sleep.await_count == 1
