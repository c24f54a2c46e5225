"""Backoff retry for transient Veo submit/poll failures.

Only rate-limit and availability errors are retried. Everything else,
including the credential failure, propagates unchanged on the first attempt
so the scheduler can react to it.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .config import get_config
from .errors import is_credential_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRANSIENT_MARKERS: tuple[str, ...] = (
    "429",
    "quota",
    "resource_exhausted",
    "timeout",
    "503",
    "service unavailable",
)


def is_transient(exc: Exception) -> bool:
    """True when *exc* looks like a rate limit or temporary outage."""
    if is_credential_error(exc):
        return False
    msg = str(exc).lower()
    return any(marker in msg for marker in _TRANSIENT_MARKERS)


def backoff_delay(attempt: int, base: float, cap: float) -> float:
    """Exponential delay for *attempt* (0-based) plus up to 1s jitter, capped."""
    return min(base * (2 ** attempt) + random.random(), cap)


async def with_retry(
    call: Callable[[], Awaitable[T]],
    *,
    label: str = "veo call",
) -> T:
    """Await ``call()`` and retry it while it fails transiently.

    Args:
        call: Zero-arg callable returning a fresh awaitable per attempt.
        label: Name used in log lines (e.g. ``"submit"``, ``"poll"``).

    Returns:
        The first successful result.

    Raises:
        The original exception when it is not transient or attempts run out.
    """
    cfg = get_config()
    attempts = cfg.retry_max_attempts

    for attempt in range(attempts):
        try:
            return await call()
        except Exception as exc:
            if not is_transient(exc) or attempt + 1 >= attempts:
                raise
            delay = backoff_delay(attempt, cfg.retry_base_delay, cfg.retry_max_delay)
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                label, attempt + 1, attempts, delay, exc,
            )
            await asyncio.sleep(delay)
    raise RuntimeError(f"{label}: retry loop exited without a result")
